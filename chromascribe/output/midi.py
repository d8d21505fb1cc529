"""MIDI export - Standard MIDI File (format 1) encoding.

Layout of the produced file:
    MThd (format 1, track count, ticks per quarter note)
    MTrk tempo track (set-tempo meta event)
    MTrk chord track, channel 0 (optional)
    MTrk melody track, channel 1 (optional)

Identical input always yields identical bytes.
"""

import math
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from ..core.constants import DEFAULT_PPQ, DEFAULT_TEMPO, MIDI_MAX, MIDI_MIN
from ..core.errors import InvalidInputError
from ..core.events import ChordEvent, NoteEvent
from ..core.mathutil import clamp, round_half_up
from ..core.options import AnalysisResult

HEADER_CHUNK_ID = b"MThd"
TRACK_CHUNK_ID = b"MTrk"
END_OF_TRACK = bytes((0x00, 0xFF, 0x2F, 0x00))

NOTE_ON = 0x90
NOTE_OFF = 0x80
CHORD_CHANNEL = 0
MELODY_CHANNEL = 1


@dataclass
class MidiExportOptions:
    """Configuration for MIDI export.

    Attributes:
        tempo_bpm: Tempo written to the tempo track and used for tick conversion
        ppq: Ticks per quarter note (1 - 32767)
        include_melody: Write the melody track
        include_chords: Write the chord track
        chord_base_octave: Chord roots are placed at chord_base_octave * 12
    """

    tempo_bpm: float = DEFAULT_TEMPO
    ppq: int = DEFAULT_PPQ
    include_melody: bool = True
    include_chords: bool = True
    chord_base_octave: int = 4

    def validate(self) -> None:
        if (
            isinstance(self.tempo_bpm, bool)
            or not isinstance(self.tempo_bpm, (int, float))
            or not math.isfinite(self.tempo_bpm)
            or self.tempo_bpm <= 0
        ):
            raise InvalidInputError(
                f"tempo_bpm must be a finite positive number, got {self.tempo_bpm}"
            )
        if isinstance(self.ppq, bool) or not isinstance(self.ppq, int):
            raise InvalidInputError(f"ppq must be an integer, got {self.ppq!r}")
        if not 0 < self.ppq <= 0x7FFF:
            raise InvalidInputError(f"ppq must be an integer in 1..32767, got {self.ppq}")


@dataclass(frozen=True)
class MidiEvent:
    """A channel note event at an absolute tick."""

    tick: int
    is_note_on: bool
    channel: int
    pitch: int
    velocity: int

    @property
    def sort_key(self):
        # At equal ticks note-offs go first, then lower pitches
        return (self.tick, 1 if self.is_note_on else 0, self.pitch)


def encode_vlq(value: int) -> bytes:
    """
    Encode a variable-length quantity.

    Seven bits per byte, most significant group first, continuation bit set
    on every byte but the last (e.g. 128 -> 81 00, 16383 -> FF 7F).
    """
    if value < 0:
        raise InvalidInputError(f"VLQ value must be non-negative, got {value}")

    groups = [value & 0x7F]
    value >>= 7
    while value > 0:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))


def seconds_to_ticks(seconds: float, tempo_bpm: float, ppq: int) -> int:
    """Convert seconds to ticks, floored at 0."""
    return max(0, round_half_up(seconds * (tempo_bpm * ppq) / 60))


def chord_to_midi_pitches(chord: ChordEvent, chord_base_octave: int = 4) -> List[int]:
    """Voice a chord from its root at chord_base_octave * 12, clamped to 0-127."""
    if chord.root_pitch_class is None:
        return []
    root_midi = chord_base_octave * 12 + chord.root_pitch_class
    return [int(clamp(root_midi + i, MIDI_MIN, MIDI_MAX)) for i in chord.quality.intervals]


def chord_velocity(chord: ChordEvent) -> int:
    confidence = chord.confidence or 0.5
    return int(clamp(round_half_up(55 + confidence * 45), 40, 110))


def note_velocity(note: NoteEvent) -> int:
    if note.velocity:
        return int(clamp(note.velocity, 1, 127))
    return int(clamp(round_half_up(50 + note.confidence * 70), 40, 120))


def encode_chunk(chunk_id: bytes, body: bytes) -> bytes:
    """Wrap body in a chunk with a big-endian 32-bit length."""
    return chunk_id + struct.pack(">I", len(body)) + body


def encode_track(events: Iterable[MidiEvent]) -> bytes:
    """
    Encode note events as an MTrk chunk.

    Events are ordered by tick, note-off before note-on, then pitch; the
    track always ends with an end-of-track meta event.
    """
    body = bytearray()
    last_tick = 0

    for event in sorted(events, key=lambda e: e.sort_key):
        body += encode_vlq(max(0, event.tick - last_tick))
        status = (NOTE_ON if event.is_note_on else NOTE_OFF) | (event.channel & 0x0F)
        body += bytes((status, event.pitch & 0x7F, event.velocity & 0x7F))
        last_tick = event.tick

    body += END_OF_TRACK
    return encode_chunk(TRACK_CHUNK_ID, bytes(body))


def create_tempo_track(tempo_bpm: float) -> bytes:
    """Tempo track holding one set-tempo meta event (microseconds per quarter)."""
    mpqn = round_half_up(60_000_000 / tempo_bpm)
    body = bytes((0x00, 0xFF, 0x51, 0x03)) + (mpqn & 0xFFFFFF).to_bytes(3, "big") + END_OF_TRACK
    return encode_chunk(TRACK_CHUNK_ID, body)


def encode_header(track_count: int, ppq: int) -> bytes:
    """14-byte MThd chunk for a format 1 file."""
    return encode_chunk(HEADER_CHUNK_ID, struct.pack(">HHH", 1, track_count, ppq))


class MIDIExporter:
    """Export analysis results to Standard MIDI Files."""

    def __init__(self, options: Optional[MidiExportOptions] = None):
        """
        Initialize MIDIExporter.

        Args:
            options: Export configuration (defaults: 120 BPM, 480 PPQ, both tracks)
        """
        self.options = options or MidiExportOptions()
        self.options.validate()

    def _ticks(self, seconds: float) -> int:
        return seconds_to_ticks(seconds, self.options.tempo_bpm, self.options.ppq)

    def chord_events(self, chords: Iterable[ChordEvent]) -> List[MidiEvent]:
        """Note-on/off pairs for every chord tone on the chord channel."""
        events = []
        for chord in chords:
            start_tick = self._ticks(chord.start_sec)
            end_tick = max(start_tick + 1, self._ticks(chord.start_sec + chord.duration_sec))
            velocity = chord_velocity(chord)

            for pitch in chord_to_midi_pitches(chord, self.options.chord_base_octave):
                events.append(MidiEvent(start_tick, True, CHORD_CHANNEL, pitch, velocity))
                events.append(MidiEvent(end_tick, False, CHORD_CHANNEL, pitch, 0))
        return events

    def melody_events(self, notes: Iterable[NoteEvent]) -> List[MidiEvent]:
        """Note-on/off pairs for every note on the melody channel."""
        events = []
        for note in notes:
            pitch = int(clamp(round_half_up(note.pitch_midi), MIDI_MIN, MIDI_MAX))
            start_tick = self._ticks(note.start_sec)
            end_tick = max(start_tick + 1, self._ticks(note.start_sec + note.duration_sec))
            velocity = note_velocity(note)

            events.append(MidiEvent(start_tick, True, MELODY_CHANNEL, pitch, velocity))
            events.append(MidiEvent(end_tick, False, MELODY_CHANNEL, pitch, 0))
        return events

    def export_bytes(self, result: AnalysisResult) -> bytes:
        """
        Encode an analysis result as MIDI file bytes.

        The melody track uses the melody notes, or every tracked note when
        no melody was extracted.
        """
        tracks = [create_tempo_track(self.options.tempo_bpm)]

        if self.options.include_chords:
            tracks.append(encode_track(self.chord_events(result.chords)))

        if self.options.include_melody:
            source = result.melody_notes if result.melody_notes else result.notes
            tracks.append(encode_track(self.melody_events(source)))

        return encode_header(len(tracks), self.options.ppq) + b"".join(tracks)

    def export(self, result: AnalysisResult, output_path: str) -> None:
        """
        Export an analysis result to a MIDI file.

        Args:
            result: Analysis result
            output_path: Path to output MIDI file
        """
        data = self.export_bytes(result)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        Path(output_path).write_bytes(data)


def export_to_midi(result: AnalysisResult, options: Optional[MidiExportOptions] = None) -> bytes:
    """Functional form of MIDIExporter.export_bytes."""
    return MIDIExporter(options).export_bytes(result)
