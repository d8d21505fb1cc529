"""Inference layer - Musical understanding from frames and notes.

This layer builds higher-level musical understanding:
- Melody/harmony split (top-voice voting over tracked notes)
- Chord inference (template matching over chroma windows)
- Key estimation (Krumhansl-Schmuckler correlation)
- Atonality scoring

Pipeline: [notes, chroma] -> [melody/harmony, chords, key] -> atonality
"""

from .melody import MelodyHarmonySplitter, VoiceSplit, split_melody_harmony
from .chords import (
    ChordAnalyzer,
    ChordInference,
    ChordInferenceConfig,
    ChordScore,
    infer_chords_from_chroma,
    score_chord_templates,
)
from .key import KeyDetector, KeyCandidate, estimate_key_from_chroma, key_confidence
from .atonality import AtonalityScorer, AtonalityScore, score_atonality

__all__ = [
    # Melody/harmony
    "MelodyHarmonySplitter",
    "VoiceSplit",
    "split_melody_harmony",
    # Chords
    "ChordAnalyzer",
    "ChordInference",
    "ChordInferenceConfig",
    "ChordScore",
    "infer_chords_from_chroma",
    "score_chord_templates",
    # Key
    "KeyDetector",
    "KeyCandidate",
    "estimate_key_from_chroma",
    "key_confidence",
    # Atonality
    "AtonalityScorer",
    "AtonalityScore",
    "score_atonality",
]
