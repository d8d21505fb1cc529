"""Tests for atonality scoring."""

import numpy as np
import pytest

from chromascribe.core import ChordEvent, ChordQuality, KeyEstimate
from chromascribe.inference import AtonalityScorer, score_atonality
from chromascribe.inference.atonality import chord_erraticness, chroma_entropy


def chord(root, quality=ChordQuality.MAJOR, start=0.0, confidence=1.0):
    return ChordEvent(
        root_pitch_class=root,
        quality=quality,
        label=quality.label_for(root),
        start_sec=start,
        duration_sec=0.5,
        confidence=confidence,
    )


class TestChromaEntropy:
    def test_uniform(self):
        assert chroma_entropy(np.ones(12)) == pytest.approx(1.0)

    def test_single_pitch_class(self):
        one_hot = np.zeros(12)
        one_hot[4] = 1.0
        assert chroma_entropy(one_hot) == pytest.approx(0.0)

    def test_silent(self):
        assert chroma_entropy(np.zeros(12)) == 1.0


class TestChordErraticness:
    def test_no_chords(self):
        assert chord_erraticness([]) == 1.0

    def test_single_chord(self):
        assert chord_erraticness([chord(0)]) == 0.0

    def test_changes(self):
        chords = [chord(0), chord(7), chord(7), chord(0)]
        assert chord_erraticness(chords) == pytest.approx(2 / 3)


class TestAtonalityScorer:
    def test_empty_analysis_scores_one(self):
        scored = score_atonality(None, [], [])
        assert scored.atonal_score == 1.0
        assert scored.is_atonal

    def test_tonal_material(self):
        key = KeyEstimate(tonic_pitch_class=0, mode="major", confidence=1.0, label="C major")
        one_hot = np.zeros(12)
        one_hot[0] = 1.0
        scored = score_atonality(key, [chord(0)], [one_hot] * 4)

        assert scored.atonal_score == pytest.approx(0.0)
        assert not scored.is_atonal

    def test_factors_reported(self):
        scored = score_atonality(None, [chord(0, confidence=0.5)], [np.ones(12)])
        assert set(scored.factors) == set(AtonalityScorer.WEIGHTS)
        assert scored.factors["chord_mismatch"] == pytest.approx(0.5)
        assert scored.atonal_score == pytest.approx(0.35 + 0.15 + 0.20)

    def test_weights_sum_to_one(self):
        assert sum(AtonalityScorer.WEIGHTS.values()) == pytest.approx(1.0)

    def test_threshold_inclusive(self):
        assert AtonalityScorer(threshold=1.0).score(None, [], []).is_atonal

    def test_threshold_controls_verdict(self):
        key = KeyEstimate(tonic_pitch_class=0, mode="major", confidence=0.5, label="C major")
        args = (key, [chord(0)], [np.ones(12)])
        # score = 0.35 * 0.5 + 0.20 * 1.0 = 0.375
        assert AtonalityScorer(threshold=0.3).score(*args).is_atonal
        assert not AtonalityScorer(threshold=0.65).score(*args).is_atonal

    def test_score_in_unit_range(self):
        rng = np.random.default_rng(3)
        chords = [chord(int(r)) for r in rng.integers(0, 12, 10)]
        scored = score_atonality(None, chords, rng.random((20, 12)))
        assert 0.0 <= scored.atonal_score <= 1.0
