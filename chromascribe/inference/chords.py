"""Chord inference - Template matching over chroma windows.

Implements chord detection with:
- 120 templates (10 qualities x 12 roots) scored against normalized chroma
- Non-chord-tone penalty and best-vs-runner-up confidence margin
- Sliding windows with hysteresis for low-confidence windows
- Merging of adjacent windows that share a label
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core.events import ChordEvent, ChordQuality
from ..core.mathutil import clamp


@dataclass
class ChordScore:
    """Best template match for one chroma vector."""

    root_pitch_class: int
    quality: ChordQuality
    label: str
    confidence: float
    score: float = 0.0
    runner_up_score: Optional[float] = None
    scores: Dict[str, float] = field(default_factory=dict)  # label -> score


@dataclass
class ChordInferenceConfig:
    """Configuration for windowed chord inference.

    Attributes:
        window_ms: Window length (default: 500, floored at 250)
        hop_ms: Window advance (default: 250, floored at 100)
        hysteresis_confidence: Below this, the previous chord is carried
            forward (default: 0.45)
    """

    window_ms: float = 500.0
    hop_ms: float = 250.0
    hysteresis_confidence: float = 0.45


@dataclass
class ChordInference:
    """Container for chord inference output."""

    chords: List[ChordEvent]
    window_scores: List[Dict[str, float]] = field(default_factory=list)


@dataclass
class _Window:
    start_sec: float
    end_sec: float
    root_pitch_class: int
    quality: ChordQuality
    label: str
    confidence: float


def _build_templates():
    candidates = []
    rows = []
    for root in range(12):
        for quality in ChordQuality:
            mask = np.zeros(12)
            mask[list(quality.pitch_classes(root))] = 1.0
            candidates.append((root, quality, quality.label_for(root)))
            rows.append(mask)
    return candidates, np.vstack(rows)


def normalize_distribution(vector: Sequence[float]) -> np.ndarray:
    """Clamp negatives to zero and scale to sum 1 (all zeros if silent)."""
    values = np.nan_to_num(np.asarray(vector, dtype=float), nan=0.0)
    values = np.maximum(values, 0.0)
    total = values.sum()
    if total == 0:
        return np.zeros_like(values)
    return values / total


class ChordAnalyzer:
    """Infer a chord progression from chroma frames."""

    # Weight of energy outside the chord's pitch classes
    NON_CHORD_TONE_PENALTY = 0.35
    # Score margin that maps to full confidence
    CONFIDENCE_MARGIN_SCALE = 0.2
    MIN_WINDOW_SEC = 0.25
    MIN_HOP_SEC = 0.1
    # Frame step assumed when only one frame exists
    SINGLE_FRAME_STEP_SEC = 0.03
    MIN_FRAME_STEP_SEC = 0.02

    # Candidate order is root-major, then ChordQuality order
    CANDIDATES, TEMPLATE_MATRIX = _build_templates()

    def __init__(self, config: Optional[ChordInferenceConfig] = None):
        self.config = config or ChordInferenceConfig()

    def score(self, chroma: Sequence[float]) -> ChordScore:
        """
        Score one chroma vector against every template.

        score = sum(chord-tone energy) - 0.35 * sum(other energy), on the
        sum-normalized vector. Ties go to the earlier candidate.

        Returns:
            ChordScore for the best candidate
        """
        normalized = normalize_distribution(chroma)
        chord_energy = self.TEMPLATE_MATRIX @ normalized
        other_energy = (1.0 - self.TEMPLATE_MATRIX) @ normalized
        scores = chord_energy - self.NON_CHORD_TONE_PENALTY * other_energy

        best_index = int(np.argmax(scores))
        best_score = float(scores[best_index])
        runner_up = np.delete(scores, best_index)
        runner_up_score = float(runner_up.max()) if runner_up.size else None

        margin = max(0.0, best_score - runner_up_score) if runner_up_score is not None \
            else max(0.0, best_score)
        confidence = clamp(
            margin / self.CONFIDENCE_MARGIN_SCALE + max(0.0, best_score), 0.0, 1.0
        )

        root, quality, label = self.CANDIDATES[best_index]
        return ChordScore(
            root_pitch_class=root,
            quality=quality,
            label=label,
            confidence=confidence,
            score=best_score,
            runner_up_score=runner_up_score,
            scores={c[2]: float(s) for c, s in zip(self.CANDIDATES, scores)},
        )

    def infer(
        self,
        chroma_frames: Sequence[Sequence[float]],
        frame_times_sec: Sequence[float],
    ) -> ChordInference:
        """
        Infer chord events from time-ordered chroma frames.

        Args:
            chroma_frames: One 12-element chroma vector per frame
            frame_times_sec: Start time of each frame

        Returns:
            ChordInference with merged chords and per-window scores
        """
        n = min(len(chroma_frames), len(frame_times_sec))
        if n == 0:
            return ChordInference(chords=[])

        frames = np.asarray(chroma_frames, dtype=float)[:n]
        times = np.asarray(frame_times_sec, dtype=float)[:n]

        if n > 1:
            frame_step = max(self.MIN_FRAME_STEP_SEC, float(times[1] - times[0]))
        else:
            frame_step = self.SINGLE_FRAME_STEP_SEC

        window_sec = max(self.MIN_WINDOW_SEC, (self.config.window_ms or 500.0) / 1000.0)
        hop_sec = max(self.MIN_HOP_SEC, (self.config.hop_ms or 250.0) / 1000.0)
        total_sec = float(times[-1]) + frame_step

        windows: List[_Window] = []
        window_scores: List[Dict[str, float]] = []

        index = 0
        start = 0.0
        while start < total_sec:
            end = min(total_sec, start + window_sec)
            in_window = (times >= start) & (times < end)

            if in_window.any():
                aggregated = np.nan_to_num(frames[in_window], nan=0.0).mean(axis=0)
                scored = self.score(aggregated)
                window_scores.append(scored.scores)
                windows.append(self._stabilize(scored, start, end, windows))

            index += 1
            start = index * hop_sec

        return ChordInference(chords=self._merge(windows), window_scores=window_scores)

    def _stabilize(
        self,
        scored: ChordScore,
        start: float,
        end: float,
        previous_windows: List[_Window],
    ) -> _Window:
        """Carry the previous chord forward when this window is unsure."""
        window = _Window(
            start_sec=start,
            end_sec=end,
            root_pitch_class=scored.root_pitch_class,
            quality=scored.quality,
            label=scored.label,
            confidence=scored.confidence,
        )
        if previous_windows and scored.confidence < self.config.hysteresis_confidence:
            previous = previous_windows[-1]
            window.root_pitch_class = previous.root_pitch_class
            window.quality = previous.quality
            window.label = previous.label
        return window

    def _merge(self, windows: List[_Window]) -> List[ChordEvent]:
        """Merge runs of equal labels; confidence is the max over the run."""
        chords: List[ChordEvent] = []
        run: Optional[_Window] = None
        run_end = 0.0
        run_confidence = 0.0

        for window in windows:
            if run is not None and run.label == window.label:
                run_end = window.end_sec
                run_confidence = max(run_confidence, window.confidence)
                continue

            if run is not None:
                chords.append(self._to_event(run, run_end, run_confidence))
            run = window
            run_end = window.end_sec
            run_confidence = window.confidence

        if run is not None:
            chords.append(self._to_event(run, run_end, run_confidence))

        return chords

    @staticmethod
    def _to_event(window: _Window, end_sec: float, confidence: float) -> ChordEvent:
        return ChordEvent(
            root_pitch_class=window.root_pitch_class,
            quality=window.quality,
            label=window.label,
            start_sec=window.start_sec,
            duration_sec=end_sec - window.start_sec,
            confidence=confidence,
        )


def score_chord_templates(chroma: Sequence[float]) -> ChordScore:
    """Score one chroma vector with the default analyzer."""
    return ChordAnalyzer().score(chroma)


def infer_chords_from_chroma(
    chroma_frames: Sequence[Sequence[float]],
    frame_times_sec: Sequence[float],
    config: Optional[ChordInferenceConfig] = None,
) -> ChordInference:
    """Functional form of ChordAnalyzer.infer."""
    return ChordAnalyzer(config).infer(chroma_frames, frame_times_sec)
