"""Event types produced by the analysis chain.

All events are immutable value objects created once per ``analyze`` call.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .constants import PITCH_NAMES


@dataclass(frozen=True)
class NoteEvent:
    """A tracked note."""

    pitch_midi: int  # MIDI pitch (0-127)
    start_sec: float  # Start time in seconds
    duration_sec: float  # Duration in seconds
    confidence: float  # 0.0 - 1.0
    velocity: Optional[int] = None  # MIDI velocity (1-127)

    @property
    def end_sec(self) -> float:
        """Note end time in seconds."""
        return self.start_sec + self.duration_sec

    @property
    def pitch_class(self) -> int:
        """Get pitch class (0-11, where 0=C)."""
        return self.pitch_midi % 12

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        octave = (self.pitch_midi // 12) - 1
        return f"{PITCH_NAMES[self.pitch_class]}{octave}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ChordQuality(Enum):
    """Closed set of chord qualities with their interval shapes.

    Each member is (code, intervals from root, label suffix). Template order
    here is the scoring order, so it also decides ties.
    """

    MAJOR = ("maj", (0, 4, 7), "")
    MINOR = ("min", (0, 3, 7), "m")
    DIMINISHED = ("dim", (0, 3, 6), "dim")
    AUGMENTED = ("aug", (0, 4, 8), "aug")
    SUS2 = ("sus2", (0, 2, 7), "sus2")
    SUS4 = ("sus4", (0, 5, 7), "sus4")
    DOMINANT7 = ("7", (0, 4, 7, 10), "7")
    MAJOR7 = ("maj7", (0, 4, 7, 11), "maj7")
    MINOR7 = ("min7", (0, 3, 7, 10), "m7")
    HALF_DIMINISHED7 = ("hdim7", (0, 3, 6, 10), "m7b5")

    def __init__(self, code: str, intervals: Tuple[int, ...], suffix: str):
        self.code = code
        self.intervals = intervals
        self.suffix = suffix

    def label_for(self, root_pitch_class: int) -> str:
        """Chord symbol for this quality on a root (e.g. 'Am', 'Bm7b5')."""
        return f"{PITCH_NAMES[root_pitch_class % 12]}{self.suffix}"

    def pitch_classes(self, root_pitch_class: int) -> Tuple[int, ...]:
        return tuple((root_pitch_class + i) % 12 for i in self.intervals)


@dataclass(frozen=True)
class ChordEvent:
    """A chord spanning one or more merged analysis windows."""

    root_pitch_class: Optional[int]  # 0-11
    quality: ChordQuality
    label: str  # Display symbol, e.g. "C", "F#m7"
    start_sec: float
    duration_sec: float
    confidence: float  # 0.0 - 1.0

    @property
    def end_sec(self) -> float:
        return self.start_sec + self.duration_sec

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root_pitch_class": self.root_pitch_class,
            "quality": self.quality.code,
            "label": self.label,
            "start_sec": self.start_sec,
            "duration_sec": self.duration_sec,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class KeyEstimate:
    """Estimated tonal center."""

    tonic_pitch_class: int  # 0-11
    mode: str  # "major" or "minor"
    confidence: float  # 0.0 - 1.0
    label: str  # e.g. "A minor"

    @property
    def relative_key(self) -> str:
        """Relative major/minor, 3 semitones away."""
        if self.mode == "major":
            return f"{PITCH_NAMES[(self.tonic_pitch_class - 3) % 12]} minor"
        return f"{PITCH_NAMES[(self.tonic_pitch_class + 3) % 12]} major"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
