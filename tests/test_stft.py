"""Tests for the Hann window, FFT and framing."""

import numpy as np
import pytest

from chromascribe.analysis.stft import (
    FFTPlan,
    compute_stft_frames,
    create_hann_window,
    fft_in_place,
    get_fft_plan,
)
from chromascribe.core import InvalidInputError


class TestHannWindow:
    def test_endpoints_and_center(self):
        window = create_hann_window(9)
        assert window[0] == pytest.approx(0.0)
        assert window[-1] == pytest.approx(0.0)
        assert window[4] == pytest.approx(1.0)

    def test_symmetric(self):
        window = create_hann_window(2048)
        np.testing.assert_allclose(window, window[::-1], atol=1e-12)

    def test_formula(self):
        size = 16
        i = np.arange(size)
        expected = 0.5 * (1 - np.cos(2 * np.pi * i / (size - 1)))
        np.testing.assert_allclose(create_hann_window(size), expected)

    def test_size_one(self):
        np.testing.assert_array_equal(create_hann_window(1), [1.0])


class TestFFT:
    """Tests for the radix-2 FFT."""

    @pytest.mark.parametrize("size", [1, 2, 8, 64, 1024])
    def test_matches_numpy(self, size):
        rng = np.random.default_rng(size)
        real = rng.standard_normal(size)
        imag = rng.standard_normal(size)
        expected = np.fft.fft(real + 1j * imag)

        fft_in_place(real, imag)

        np.testing.assert_allclose(real, expected.real, atol=1e-9)
        np.testing.assert_allclose(imag, expected.imag, atol=1e-9)

    def test_impulse_is_flat(self):
        real = np.zeros(32)
        imag = np.zeros(32)
        real[0] = 1.0
        fft_in_place(real, imag)
        np.testing.assert_allclose(real, np.ones(32), atol=1e-12)
        np.testing.assert_allclose(imag, np.zeros(32), atol=1e-12)

    @pytest.mark.parametrize("size", [0, 3, 6, 100])
    def test_non_power_of_two_rejected(self, size):
        with pytest.raises(InvalidInputError):
            fft_in_place(np.zeros(size), np.zeros(size))

    def test_mismatched_lengths_rejected(self):
        with pytest.raises(InvalidInputError):
            fft_in_place(np.zeros(8), np.zeros(16))

    def test_plan_rejects_wrong_length(self):
        plan = FFTPlan(8)
        with pytest.raises(InvalidInputError):
            plan.execute(np.zeros(16), np.zeros(16))

    def test_plans_are_shared(self):
        assert get_fft_plan(256) is get_fft_plan(256)


class TestComputeStftFrames:
    def test_empty_buffer(self):
        frames = compute_stft_frames(np.zeros(0, dtype=np.float32), 8000, 256, 64)
        assert frames.n_frames == 0
        assert frames.spectra.shape == (0, 128)

    def test_frame_count_and_times(self):
        audio = np.ones(300, dtype=np.float32)
        frames = compute_stft_frames(audio, 8000, frame_size=256, hop_size=64)

        # Second frame reaches the end of the buffer and is the last one
        assert frames.n_frames == 2
        assert frames.frame_times_sec == pytest.approx([0.0, 64 / 8000])
        assert frames.spectra.shape == (2, 128)

    def test_short_buffer_gives_one_frame(self):
        audio = np.ones(100, dtype=np.float32)
        frames = compute_stft_frames(audio, 8000, frame_size=256, hop_size=64)
        assert frames.n_frames == 1

    def test_sine_peaks_at_expected_bin(self):
        sr = 8000
        t = np.arange(256) / sr
        audio = np.sin(2 * np.pi * 1000 * t).astype(np.float32)

        frames = compute_stft_frames(audio, sr, frame_size=256, hop_size=128)

        assert int(np.argmax(frames.spectra[0])) == 32
        assert frames.bin_frequencies_hz[32] == pytest.approx(1000.0)

    def test_non_power_of_two_frame_size(self):
        with pytest.raises(InvalidInputError):
            compute_stft_frames(np.zeros(1000, dtype=np.float32), 8000, frame_size=1000)
