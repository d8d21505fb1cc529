"""Short-time spectral analysis.

Implements the framing and transform used by transcription:
- Symmetric Hann window
- In-place radix-2 Cooley-Tukey FFT over separate real/imag arrays
- Overlapping frames with zero padding past the end of the buffer
"""

import functools
import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ..core.constants import DEFAULT_FRAME_SIZE
from ..core.errors import InvalidInputError


@dataclass
class StftFrames:
    """Container for short-time magnitude spectra."""

    spectra: np.ndarray  # [n_frames, frame_size // 2]
    frame_times_sec: List[float]  # Start time of each frame
    bin_frequencies_hz: np.ndarray  # Center frequency of each bin

    @property
    def n_frames(self) -> int:
        return len(self.frame_times_sec)


def create_hann_window(size: int) -> np.ndarray:
    """Symmetric Hann window: 0.5 * (1 - cos(2*pi*i / (N - 1)))."""
    if size <= 0:
        return np.zeros(0)
    if size == 1:
        return np.ones(1)
    i = np.arange(size)
    return 0.5 * (1 - np.cos((2 * np.pi * i) / (size - 1)))


def _is_power_of_two(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


def _bit_reversal_permutation(n: int) -> np.ndarray:
    """Index order produced by the classic in-place bit-reversal swap loop."""
    perm = np.arange(n)
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j ^= bit
        if i < j:
            perm[i], perm[j] = perm[j], perm[i]
    return perm


class FFTPlan:
    """Precomputed permutation and twiddles for a fixed transform size.

    Twiddles for each butterfly stage are generated with the rotation
    recurrence w[k+1] = w[k] * exp(-2j*pi/len), starting from w[0] = 1.
    Plans are immutable once built and may be shared between calls.
    """

    def __init__(self, size: int):
        if not isinstance(size, (int, np.integer)) or not _is_power_of_two(int(size)):
            raise InvalidInputError(f"FFT size must be a power of two, got {size!r}")

        self.size = int(size)
        self.permutation = _bit_reversal_permutation(self.size)
        self.stages: List[Tuple[int, np.ndarray, np.ndarray]] = []

        length = 2
        while length <= self.size:
            half = length // 2
            angle = -2 * math.pi / length
            step_cos, step_sin = math.cos(angle), math.sin(angle)

            w_cos = np.empty(half)
            w_sin = np.empty(half)
            cur_cos, cur_sin = 1.0, 0.0
            for k in range(half):
                w_cos[k] = cur_cos
                w_sin[k] = cur_sin
                cur_cos, cur_sin = (
                    cur_cos * step_cos - cur_sin * step_sin,
                    cur_cos * step_sin + cur_sin * step_cos,
                )

            w_cos.setflags(write=False)
            w_sin.setflags(write=False)
            self.stages.append((half, w_cos, w_sin))
            length <<= 1

        self.permutation.setflags(write=False)

    def execute(self, real: np.ndarray, imag: np.ndarray) -> None:
        """
        Transform real/imag in place.

        Args:
            real: Contiguous float array of length ``size``
            imag: Contiguous float array of length ``size``
        """
        for name, arr in (("real", real), ("imag", imag)):
            if not isinstance(arr, np.ndarray) or arr.ndim != 1:
                raise InvalidInputError(f"{name} must be a 1-D numpy array")
            if arr.shape[0] != self.size:
                raise InvalidInputError(
                    f"{name} has length {arr.shape[0]}, plan size is {self.size}"
                )
            if not arr.flags.c_contiguous or not arr.flags.writeable:
                raise InvalidInputError(f"{name} must be contiguous and writeable")

        real[:] = real[self.permutation]
        imag[:] = imag[self.permutation]

        for half, w_cos, w_sin in self.stages:
            # Rows are butterfly groups of length 2*half; views write through.
            re = real.reshape(-1, 2 * half)
            im = imag.reshape(-1, 2 * half)

            u_re = re[:, :half].copy()
            u_im = im[:, :half].copy()
            v_re = re[:, half:] * w_cos - im[:, half:] * w_sin
            v_im = re[:, half:] * w_sin + im[:, half:] * w_cos

            re[:, :half] = u_re + v_re
            im[:, :half] = u_im + v_im
            re[:, half:] = u_re - v_re
            im[:, half:] = u_im - v_im


@functools.lru_cache(maxsize=8)
def get_fft_plan(size: int) -> FFTPlan:
    """Return a shared plan for ``size``."""
    return FFTPlan(size)


def fft_in_place(real: np.ndarray, imag: np.ndarray) -> None:
    """In-place radix-2 Cooley-Tukey FFT. Length must be a power of two."""
    if not isinstance(real, np.ndarray) or real.ndim != 1:
        raise InvalidInputError("real must be a 1-D numpy array")
    if not isinstance(imag, np.ndarray) or real.shape != imag.shape:
        raise InvalidInputError("real and imag must be numpy arrays of the same shape")
    get_fft_plan(int(real.shape[0])).execute(real, imag)


def compute_stft_frames(
    audio: np.ndarray,
    sample_rate: float,
    frame_size: int = DEFAULT_FRAME_SIZE,
    hop_size: int = 512,
) -> StftFrames:
    """
    Compute magnitude spectra over overlapping Hann-windowed frames.

    The loop stops after the first frame that reaches the end of the
    buffer; that frame is zero-padded. An empty buffer yields no frames.

    Args:
        audio: 1-D sample buffer
        sample_rate: Sample rate in Hz
        frame_size: Samples per frame (power of two)
        hop_size: Samples between frame starts

    Returns:
        StftFrames with one spectrum of frame_size // 2 bins per frame
    """
    plan = get_fft_plan(frame_size)
    if hop_size < 1:
        raise InvalidInputError(f"hop_size must be >= 1, got {hop_size}")

    window = create_hann_window(frame_size)
    bin_count = frame_size // 2
    bin_frequencies_hz = np.arange(bin_count) * sample_rate / frame_size

    n_samples = len(audio)
    spectra = []
    frame_times_sec = []

    for frame_start in range(0, n_samples, hop_size):
        real = np.zeros(frame_size)
        imag = np.zeros(frame_size)

        segment = audio[frame_start:frame_start + frame_size]
        real[:len(segment)] = segment
        real *= window

        plan.execute(real, imag)

        spectra.append(np.hypot(real[:bin_count], imag[:bin_count]))
        frame_times_sec.append(frame_start / sample_rate)

        if frame_start + frame_size >= n_samples:
            break

    if spectra:
        spectra_arr = np.vstack(spectra)
    else:
        spectra_arr = np.zeros((0, bin_count))

    return StftFrames(
        spectra=spectra_arr,
        frame_times_sec=frame_times_sec,
        bin_frequencies_hz=bin_frequencies_hz,
    )
