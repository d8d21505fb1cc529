"""chromascribe - Offline audio to symbolic music transcription.

Architecture Layers:
    1. input/         - Preprocessing of decoded buffers, file loading (CLI)
    2. analysis/      - Spectral framing, FFT, chroma/semitone projection
    3. transcription/ - Note tracking from semitone energy
    4. inference/     - Melody/harmony split, chords, key, atonality
    5. output/        - MIDI export
"""

__version__ = "0.3.0"

# Core types
from .core import (
    NoteEvent,
    ChordEvent,
    ChordQuality,
    KeyEstimate,
    AnalysisOptions,
    AnalysisResult,
    InvalidInputError,
)

# Analysis layer
from .analysis import compute_stft_frames, fft_in_place, PitchProjector, SpectrumSmoother

# Transcription layer
from .transcription import NoteTracker, transcribe

# Inference layer
from .inference import (
    MelodyHarmonySplitter,
    ChordAnalyzer,
    KeyDetector,
    AtonalityScorer,
)

# Output layer
from .output import MIDIExporter, MidiExportOptions, export_to_midi

# Pipeline
from .pipeline import analyze

__all__ = [
    # Core
    "NoteEvent",
    "ChordEvent",
    "ChordQuality",
    "KeyEstimate",
    "AnalysisOptions",
    "AnalysisResult",
    "InvalidInputError",
    # Analysis
    "compute_stft_frames",
    "fft_in_place",
    "PitchProjector",
    "SpectrumSmoother",
    # Transcription
    "NoteTracker",
    "transcribe",
    # Inference
    "MelodyHarmonySplitter",
    "ChordAnalyzer",
    "KeyDetector",
    "AtonalityScorer",
    # Output
    "MIDIExporter",
    "MidiExportOptions",
    "export_to_midi",
    # Pipeline
    "analyze",
]
