"""Projection of magnitude spectra onto semitones and pitch classes."""

import numpy as np
from typing import Tuple

from ..core.constants import (
    DEFAULT_FRAME_SIZE,
    MAX_NOTE_MIDI,
    MAX_PROJECTION_HZ,
    MIDI_SLOTS,
    MIN_NOTE_MIDI,
    MIN_PROJECTION_HZ,
)


class PitchProjector:
    """Maps spectral bins to chroma (12 pitch classes) and 128 MIDI slots.

    Each bin from 1 upward whose center frequency lies in [27.5, 5000] Hz is
    assigned to round(69 + 12*log2(f/440)). Bins landing outside C2-C7 are
    ignored. The bin-to-semitone map is fixed by sample rate and frame size,
    so it is built once and applied as two projection matrices.
    """

    def __init__(self, sample_rate: float, frame_size: int = DEFAULT_FRAME_SIZE):
        """
        Initialize PitchProjector.

        Args:
            sample_rate: Sample rate of the analysed audio
            frame_size: Transform size used to produce the spectra
        """
        self.sample_rate = sample_rate
        self.frame_size = frame_size
        self.bin_count = frame_size // 2

        bin_frequencies = np.arange(self.bin_count) * sample_rate / frame_size
        bins = np.arange(1, self.bin_count)
        freqs = bin_frequencies[1:]

        in_band = (freqs >= MIN_PROJECTION_HZ) & (freqs <= MAX_PROJECTION_HZ)
        bins = bins[in_band]
        freqs = freqs[in_band]

        midi = np.floor(69 + 12 * np.log2(freqs / 440.0) + 0.5).astype(int)
        in_range = (midi >= MIN_NOTE_MIDI) & (midi <= MAX_NOTE_MIDI)

        self.bins = bins[in_range]
        self.bin_midi = midi[in_range]

        self._midi_matrix = np.zeros((len(self.bins), MIDI_SLOTS))
        self._midi_matrix[np.arange(len(self.bins)), self.bin_midi] = 1.0
        self._chroma_matrix = np.zeros((len(self.bins), 12))
        self._chroma_matrix[np.arange(len(self.bins)), self.bin_midi % 12] = 1.0

    def project_frames(self, spectra: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Project a stack of magnitude spectra.

        Args:
            spectra: Magnitudes [n_frames, frame_size // 2]

        Returns:
            Tuple of (chroma [n_frames, 12] peak-normalized per frame,
            midi_energy [n_frames, 128])
        """
        spectra = np.atleast_2d(spectra)
        if spectra.shape[0] == 0:
            return np.zeros((0, 12)), np.zeros((0, MIDI_SLOTS))

        energy = spectra[:, self.bins]
        chroma = energy @ self._chroma_matrix
        midi_energy = energy @ self._midi_matrix

        peaks = chroma.max(axis=1, keepdims=True)
        chroma = np.divide(chroma, peaks, out=np.zeros_like(chroma), where=peaks > 0)

        return chroma, midi_energy

    def project(self, spectrum: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Project a single spectrum. Returns (chroma[12], midi_energy[128])."""
        chroma, midi_energy = self.project_frames(spectrum[np.newaxis, :])
        return chroma[0], midi_energy[0]
