"""Atonality scoring - How weakly a piece commits to a tonal center.

Blends four instability signals into one score in [0, 1]:
- key instability (1 - key confidence)
- chord mismatch (1 - mean chord confidence)
- chord erraticness (share of chord transitions that change label)
- chroma entropy (mean normalized Shannon entropy per frame)
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

import numpy as np

from ..core.events import ChordEvent, KeyEstimate
from ..core.mathutil import clamp

LOG2_12 = math.log2(12)


@dataclass
class AtonalityScore:
    """Container for atonality scoring results."""

    atonal_score: float
    is_atonal: bool
    factors: Dict[str, float] = field(default_factory=dict)


def chroma_entropy(chroma: Sequence[float]) -> float:
    """Shannon entropy of one chroma vector over log2(12). Silent frames give 1."""
    values = np.maximum(np.asarray(chroma, dtype=float), 0.0)
    total = values.sum()
    if total == 0:
        return 1.0
    p = values / total
    p = p[p > 0]
    return float(-(p * np.log2(p)).sum() / LOG2_12)


def chord_erraticness(chords: Sequence[ChordEvent]) -> float:
    """Fraction of adjacent chord pairs whose labels differ.

    No chords at all is treated as fully erratic; a single chord is stable.
    """
    if len(chords) == 0:
        return 1.0
    if len(chords) == 1:
        return 0.0
    changes = sum(1 for prev, cur in zip(chords, chords[1:]) if prev.label != cur.label)
    return changes / (len(chords) - 1)


class AtonalityScorer:
    """Combine key, chord and chroma evidence into an atonality verdict."""

    WEIGHTS = {
        "key_instability": 0.35,
        "chord_mismatch": 0.30,
        "chord_erraticness": 0.15,
        "chroma_entropy": 0.20,
    }

    def __init__(self, threshold: float = 0.65):
        """
        Args:
            threshold: Score at or above which a piece counts as atonal
        """
        self.threshold = threshold

    def score(
        self,
        key_estimate: Optional[KeyEstimate],
        chords: Sequence[ChordEvent],
        chroma_frames: Sequence[Sequence[float]],
    ) -> AtonalityScore:
        """
        Score a piece.

        Missing evidence counts as maximal instability: no key, no chords or
        no chroma frames each contribute their full weight, so an empty
        analysis scores exactly 1.
        """
        key_instability = 1.0 - key_estimate.confidence if key_estimate else 1.0

        chord_mismatch = 1.0
        if len(chords) > 0:
            chord_mismatch = 1.0 - sum(c.confidence for c in chords) / len(chords)

        entropy = 1.0
        if len(chroma_frames) > 0:
            entropy = float(np.mean([chroma_entropy(frame) for frame in chroma_frames]))

        factors = {
            "key_instability": key_instability,
            "chord_mismatch": chord_mismatch,
            "chord_erraticness": chord_erraticness(chords),
            "chroma_entropy": entropy,
        }
        atonal_score = clamp(
            math.fsum(self.WEIGHTS[name] * value for name, value in factors.items()),
            0.0,
            1.0,
        )

        return AtonalityScore(
            atonal_score=atonal_score,
            is_atonal=atonal_score >= self.threshold,
            factors=factors,
        )


def score_atonality(
    key_estimate: Optional[KeyEstimate],
    chords: Sequence[ChordEvent],
    chroma_frames: Sequence[Sequence[float]],
    threshold: float = 0.65,
) -> AtonalityScore:
    """Functional form of AtonalityScorer.score."""
    return AtonalityScorer(threshold).score(key_estimate, chords, chroma_frames)
