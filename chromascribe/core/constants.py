"""Global constants for chromascribe."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Spectral framing
DEFAULT_FRAME_SIZE = 2048
MIN_HOP_SIZE = 128

# Pitch projection band (Hz)
MIN_PROJECTION_HZ = 27.5  # A0
MAX_PROJECTION_HZ = 5000.0

# Semitone range tracked for chroma and notes
MIN_NOTE_MIDI = 36  # C2
MAX_NOTE_MIDI = 96  # C7
MIDI_SLOTS = 128

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127

# Preprocessing
DEFAULT_TARGET_PEAK = 0.98

# Musical defaults
DEFAULT_TEMPO = 120.0
DEFAULT_PPQ = 480
