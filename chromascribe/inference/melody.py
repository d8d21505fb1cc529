"""Melody/harmony split - Separate the top voice from accompaniment.

A framewise vote: at every time step the highest sounding note is the
"top voice". Notes that hold the top voice for most of their lifetime, and
sit high enough, form the melody; everything else is harmony.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from ..core.events import NoteEvent


@dataclass
class VoiceSplit:
    """Container for a melody/harmony partition."""

    melody_notes: List[NoteEvent] = field(default_factory=list)
    harmony_notes: List[NoteEvent] = field(default_factory=list)


class MelodyHarmonySplitter:
    """Partition tracked notes into melody and harmony."""

    # Share of active frames a note must lead to count as melody
    TOP_VOICE_RATIO = 0.55
    # Lowest melody pitch (G3)
    MIN_MELODY_PITCH = 55
    # Lower bound on the voting frame width (seconds)
    MIN_FRAME_SEC = 0.01

    def __init__(
        self,
        time_resolution_ms: float = 30.0,
        extract_melody: bool = True,
        extract_harmony: bool = True,
    ):
        """
        Initialize MelodyHarmonySplitter.

        Args:
            time_resolution_ms: Width of each voting frame
            extract_melody: Populate the melody list
            extract_harmony: Populate the harmony list
        """
        self.frame_sec = max(self.MIN_FRAME_SEC, time_resolution_ms / 1000.0)
        self.extract_melody = extract_melody
        self.extract_harmony = extract_harmony

    def vote(self, notes: Sequence[NoteEvent]) -> Tuple[np.ndarray, np.ndarray]:
        """
        Sweep the timeline and count frames per note.

        Returns:
            Tuple of (active_frames, top_frames), one entry per input note
        """
        n = len(notes)
        active_frames = np.zeros(n, dtype=int)
        top_frames = np.zeros(n, dtype=int)
        if n == 0:
            return active_frames, top_frames

        starts = np.array([note.start_sec for note in notes], dtype=float)
        ends = starts + np.array([note.duration_sec for note in notes], dtype=float)
        pitches = [note.pitch_midi for note in notes]
        confidences = [note.confidence for note in notes]
        max_end = float(ends.max())

        frame_index = 0
        frame_start = 0.0
        while frame_start <= max_end:
            frame_end = frame_start + self.frame_sec
            overlapping = np.flatnonzero((starts < frame_end) & (frame_start < ends))

            if overlapping.size:
                active_frames[overlapping] += 1

                top = int(overlapping[0])
                for i in overlapping[1:]:
                    i = int(i)
                    if pitches[i] > pitches[top] or (
                        pitches[i] == pitches[top] and confidences[i] > confidences[top]
                    ):
                        top = i
                top_frames[top] += 1

            frame_index += 1
            frame_start = frame_index * self.frame_sec

        return active_frames, top_frames

    def is_melody(self, note: NoteEvent, active_frames: int, top_frames: int) -> bool:
        ratio = top_frames / active_frames if active_frames > 0 else 0.0
        return ratio >= self.TOP_VOICE_RATIO and note.pitch_midi >= self.MIN_MELODY_PITCH

    def split(self, notes: Sequence[NoteEvent]) -> VoiceSplit:
        """
        Split notes into melody and harmony, preserving input order.

        With melody extraction off, melody candidates fall through to
        harmony; with harmony extraction off, non-melody notes are dropped.
        """
        result = VoiceSplit()
        if not notes:
            return result

        active_frames, top_frames = self.vote(notes)

        for note, active, top in zip(notes, active_frames, top_frames):
            if self.extract_melody and self.is_melody(note, int(active), int(top)):
                result.melody_notes.append(note)
            elif self.extract_harmony:
                result.harmony_notes.append(note)

        return result


def split_melody_harmony(
    notes: Sequence[NoteEvent],
    time_resolution_ms: float = 30.0,
    extract_melody: bool = True,
    extract_harmony: bool = True,
) -> Tuple[List[NoteEvent], List[NoteEvent]]:
    """Functional form of MelodyHarmonySplitter.split. Returns (melody, harmony)."""
    splitter = MelodyHarmonySplitter(
        time_resolution_ms=time_resolution_ms,
        extract_melody=extract_melody,
        extract_harmony=extract_harmony,
    )
    split = splitter.split(notes)
    return split.melody_notes, split.harmony_notes
