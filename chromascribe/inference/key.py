"""Key detection - Identify the tonal center from chroma.

Krumhansl-Schmuckler key finding: the summed chroma distribution is
correlated against major and minor key profiles rotated to each of the
12 tonics, and the best of the 24 candidates wins.
"""

import numpy as np
from typing import List, Optional, Sequence
from dataclasses import dataclass

from ..core import KeyEstimate, PITCH_NAMES
from ..core.mathutil import clamp
from .chords import normalize_distribution


@dataclass
class KeyCandidate:
    """A candidate key with its score."""
    tonic_pitch_class: int
    mode: str
    correlation: float

    @property
    def name(self) -> str:
        return f"{PITCH_NAMES[self.tonic_pitch_class]} {self.mode}"


def key_confidence(best_correlation: float, second_correlation: Optional[float]) -> float:
    """
    Confidence from the winning correlation and its lead over the runner-up.

    clamp((best + margin) / 1.2, 0, 1), where margin = max(0, best - second)
    or max(0, best) when there is no runner-up.
    """
    if second_correlation is None:
        margin = max(0.0, best_correlation)
    else:
        margin = max(0.0, best_correlation - second_correlation)
    return clamp((best_correlation + margin) / 1.2, 0.0, 1.0)


class KeyDetector:
    """Detect musical key from chroma frames."""

    # Krumhansl-Schmuckler key profiles (cognitive-based), tonic first
    KRUMHANSL_MAJOR = np.array(
        [6.35, 2.23, 3.48, 2.33, 4.38, 4.09, 2.52, 5.19, 2.39, 3.66, 2.29, 2.88]
    )
    KRUMHANSL_MINOR = np.array(
        [6.33, 2.68, 3.52, 5.38, 2.60, 3.53, 2.54, 4.75, 3.98, 2.69, 3.34, 3.17]
    )

    def aggregate(self, chroma_frames: Sequence[Sequence[float]]) -> np.ndarray:
        """Sum all frames into one sum-normalized 12-bin distribution."""
        frames = np.nan_to_num(np.asarray(chroma_frames, dtype=float), nan=0.0)
        return normalize_distribution(frames.reshape(-1, 12).sum(axis=0))

    def get_all_candidates(self, pitch_classes: np.ndarray) -> List[KeyCandidate]:
        """
        Correlate a distribution against every tonic and mode.

        Returns:
            24 candidates ordered C major, C minor, C# major, ...
        """
        candidates = []
        for tonic in range(12):
            major = np.roll(self.KRUMHANSL_MAJOR, tonic)
            minor = np.roll(self.KRUMHANSL_MINOR, tonic)
            candidates.append(KeyCandidate(tonic, "major", self._correlate(pitch_classes, major)))
            candidates.append(KeyCandidate(tonic, "minor", self._correlate(pitch_classes, minor)))
        return candidates

    def _correlate(self, distribution: np.ndarray, profile: np.ndarray) -> float:
        """
        Pearson correlation between distribution and profile.

        Degenerate (constant) input correlates as 0.
        """
        if distribution.std() == 0 or profile.std() == 0:
            return 0.0

        corr = np.corrcoef(distribution, profile)[0, 1]

        # NaN can still appear with non-finite input
        if np.isnan(corr):
            return 0.0

        return float(corr)

    def estimate(self, chroma_frames: Sequence[Sequence[float]]) -> Optional[KeyEstimate]:
        """
        Estimate the key of a set of chroma frames.

        Args:
            chroma_frames: One 12-element chroma vector per frame

        Returns:
            KeyEstimate, or None when there are no frames
        """
        if len(chroma_frames) == 0:
            return None

        pitch_classes = self.aggregate(chroma_frames)
        candidates = self.get_all_candidates(pitch_classes)

        # First maximum wins ties, in candidate order
        best_index = max(range(len(candidates)), key=lambda i: (candidates[i].correlation, -i))
        best = candidates[best_index]
        others = [c.correlation for i, c in enumerate(candidates) if i != best_index]
        second = max(others) if others else None

        return KeyEstimate(
            tonic_pitch_class=best.tonic_pitch_class,
            mode=best.mode,
            confidence=key_confidence(best.correlation, second),
            label=best.name,
        )


def estimate_key_from_chroma(chroma_frames: Sequence[Sequence[float]]) -> Optional[KeyEstimate]:
    """Functional form of KeyDetector.estimate."""
    return KeyDetector().estimate(chroma_frames)
