"""Frame-energy note tracking.

Turns per-semitone energy frames into discrete notes with a simple
onset/offset state machine:

    inactive --(energy >= 45% of frame peak)--> active
    active   --(still >= threshold)-----------> active (duration, confidence grow)
    active   --(drops below threshold / end)--> finalized (kept if long enough)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..analysis.pitch import PitchProjector
from ..analysis.smoothing import SpectrumSmoother
from ..analysis.stft import compute_stft_frames
from ..core.constants import DEFAULT_FRAME_SIZE, MAX_NOTE_MIDI, MIN_HOP_SIZE, MIN_NOTE_MIDI
from ..core.events import NoteEvent
from ..core.mathutil import clamp, round_half_up
from ..core.options import AnalysisOptions


@dataclass
class _ActiveNote:
    """Running state of a semitone that is currently sounding."""

    pitch_midi: int
    start_sec: float
    duration_sec: float
    confidence_sum: float
    frame_count: int

    @property
    def mean_confidence(self) -> float:
        return clamp(self.confidence_sum / self.frame_count, 0.0, 1.0)


class NoteTracker:
    """Track note lifetimes across semitone energy frames."""

    # Activation threshold relative to the loudest semitone in the frame
    ONSET_RATIO = 0.45

    def __init__(
        self,
        time_resolution_ms: float = 30.0,
        min_note_duration_ms: float = 80.0,
        min_midi: int = MIN_NOTE_MIDI,
        max_midi: int = MAX_NOTE_MIDI,
    ):
        """
        Initialize NoteTracker.

        Args:
            time_resolution_ms: Duration credited to a note per active frame
            min_note_duration_ms: Notes shorter than this are discarded
            min_midi: Lowest semitone considered
            max_midi: Highest semitone considered
        """
        self.frame_duration_sec = time_resolution_ms / 1000.0
        self.min_duration_sec = min_note_duration_ms / 1000.0
        self.min_midi = min_midi
        self.max_midi = max_midi

    def track(
        self,
        midi_energy_frames: np.ndarray,
        frame_times_sec: Sequence[float],
    ) -> List[NoteEvent]:
        """
        Run the state machine over all frames.

        Args:
            midi_energy_frames: Energy per MIDI slot [n_frames, 128]
            frame_times_sec: Start time of each frame

        Returns:
            Notes sorted by (start time, pitch)
        """
        notes: List[NoteEvent] = []
        active: Dict[int, _ActiveNote] = {}

        for frame_energy, frame_time in zip(midi_energy_frames, frame_times_sec):
            band = np.asarray(frame_energy[self.min_midi:self.max_midi + 1], dtype=float)
            frame_peak = float(band.max()) if band.size else 0.0

            # Silent frame: nothing activates and running notes are left as they are.
            if frame_peak <= 0:
                continue

            threshold = frame_peak * self.ONSET_RATIO
            active_now = set()

            for offset in np.flatnonzero(band >= threshold):
                midi = self.min_midi + int(offset)
                confidence = clamp(float(band[offset]) / frame_peak, 0.0, 1.0)
                active_now.add(midi)

                existing = active.get(midi)
                if existing is None:
                    active[midi] = _ActiveNote(
                        pitch_midi=midi,
                        start_sec=float(frame_time),
                        duration_sec=self.frame_duration_sec,
                        confidence_sum=confidence,
                        frame_count=1,
                    )
                else:
                    existing.duration_sec += self.frame_duration_sec
                    existing.confidence_sum += confidence
                    existing.frame_count += 1

            for midi in [m for m in active if m not in active_now]:
                self._finalize(active.pop(midi), notes)

        for state in active.values():
            self._finalize(state, notes)

        notes.sort(key=lambda n: (n.start_sec, n.pitch_midi))
        return notes

    def _finalize(self, state: _ActiveNote, notes: List[NoteEvent]) -> None:
        """Emit a note for a finished run if it is long enough."""
        if state.duration_sec < self.min_duration_sec:
            return

        confidence = state.mean_confidence
        notes.append(
            NoteEvent(
                pitch_midi=state.pitch_midi,
                start_sec=state.start_sec,
                duration_sec=state.duration_sec,
                confidence=confidence,
                velocity=round_half_up(50 + 70 * confidence),
            )
        )


@dataclass
class TranscriptionResult:
    """Container for frame-level transcription output."""

    notes: List[NoteEvent]
    chroma: np.ndarray  # [n_frames, 12], each row peak-normalized
    frame_times_sec: List[float]
    midi_energy: Optional[np.ndarray] = None  # [n_frames, 128]


def hop_size_for(sample_rate: float, time_resolution_ms: float) -> int:
    """Hop length in samples for a time resolution, never below 128."""
    return max(MIN_HOP_SIZE, round_half_up(sample_rate * time_resolution_ms / 1000.0))


def transcribe(
    audio: np.ndarray,
    sample_rate: float,
    options: AnalysisOptions,
    frame_size: int = DEFAULT_FRAME_SIZE,
) -> TranscriptionResult:
    """
    Transcribe a mono buffer into notes plus per-frame chroma.

    Args:
        audio: Preprocessed 1-D buffer
        sample_rate: Sample rate in Hz
        options: Merged analysis options
        frame_size: Transform size (power of two)

    Returns:
        TranscriptionResult
    """
    hop_size = hop_size_for(sample_rate, options.time_resolution_ms)
    frames = compute_stft_frames(
        audio,
        sample_rate,
        frame_size=frame_size,
        hop_size=hop_size,
    )

    spectra = frames.spectra
    if options.spectral_smoothing is not None:
        smoother = SpectrumSmoother(alpha=options.spectral_smoothing)
        spectra = smoother.smooth_frames(spectra)

    projector = PitchProjector(sample_rate, frame_size)
    chroma, midi_energy = projector.project_frames(spectra)

    tracker = NoteTracker(
        time_resolution_ms=options.time_resolution_ms,
        min_note_duration_ms=options.min_note_duration_ms,
    )
    notes = tracker.track(midi_energy, frames.frame_times_sec)

    return TranscriptionResult(
        notes=notes,
        chroma=chroma,
        frame_times_sec=frames.frame_times_sec,
        midi_energy=midi_energy,
    )
