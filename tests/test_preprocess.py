"""Tests for preprocessing: mono handling, peak normalization, HPSS placeholder."""

import numpy as np
import pytest

from chromascribe.core import InvalidInputError
from chromascribe.input.preprocess import (
    HPSS_PLACEHOLDER_WARNING,
    normalize_peak,
    preprocess_audio,
    to_mono,
)


class TestToMono:
    def test_returns_copy(self):
        audio = np.array([0.1, -0.2, 0.3], dtype=np.float32)
        mono = to_mono(audio)
        assert mono is not audio
        np.testing.assert_array_equal(mono, audio)

    def test_rejects_multichannel(self):
        stereo = np.zeros((2, 100), dtype=np.float32)
        with pytest.raises(InvalidInputError):
            to_mono(stereo)


class TestNormalizePeak:
    def test_scales_to_target_peak(self):
        audio = np.array([0.5, -0.25, 0.1], dtype=np.float32)
        normalized = normalize_peak(audio)
        assert np.max(np.abs(normalized)) == pytest.approx(0.98, abs=1e-6)
        assert normalized[1] == pytest.approx(-0.49, abs=1e-6)

    def test_negative_peak_is_used(self):
        audio = np.array([0.2, -0.8], dtype=np.float32)
        normalized = normalize_peak(audio, target_peak=1.0)
        assert normalized[1] == pytest.approx(-1.0, abs=1e-6)
        assert normalized[0] == pytest.approx(0.25, abs=1e-6)

    def test_silent_buffer_unchanged(self):
        audio = np.zeros(64, dtype=np.float32)
        normalized = normalize_peak(audio)
        assert len(normalized) == 64
        assert not np.any(normalized)

    def test_empty_buffer(self):
        normalized = normalize_peak(np.zeros(0, dtype=np.float32))
        assert normalized.size == 0

    def test_preserves_dtype(self):
        audio = np.array([0.5, 0.1], dtype=np.float32)
        assert normalize_peak(audio).dtype == np.float32


class TestPreprocessAudio:
    def test_without_hpss(self):
        audio = np.array([0.1, 0.4, -0.2], dtype=np.float32)
        result = preprocess_audio(audio)

        assert result.harmonic is None
        assert result.percussive is None
        assert result.warnings == []
        assert result.analysis_source is result.normalized

    def test_hpss_placeholder(self):
        audio = np.array([0.1, 0.4, -0.2], dtype=np.float32)
        result = preprocess_audio(audio, do_hpss=True)

        np.testing.assert_array_equal(result.harmonic, result.normalized)
        assert result.harmonic is not result.normalized
        assert not np.any(result.percussive)
        assert len(result.percussive) == len(audio)
        assert result.warnings == [HPSS_PLACEHOLDER_WARNING]
        assert result.analysis_source is result.harmonic

    @pytest.mark.parametrize("length", [0, 1, 2, 5, 1000])
    def test_any_length_accepted(self, length):
        rng = np.random.default_rng(length)
        audio = rng.uniform(-1, 1, length).astype(np.float32)
        result = preprocess_audio(audio, do_hpss=True)
        assert len(result.normalized) == length
        if length:
            assert np.max(np.abs(result.normalized)) <= 0.98 + 1e-6
