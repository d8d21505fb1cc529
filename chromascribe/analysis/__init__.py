"""Analysis layer - Low-level signal analysis.

This layer turns sample buffers into frame-level features:
- Short-time magnitude spectra (Hann window + radix-2 FFT)
- Chroma and per-semitone energy
- Optional EMA smoothing of spectra
"""

from .stft import (
    StftFrames,
    FFTPlan,
    create_hann_window,
    fft_in_place,
    compute_stft_frames,
)
from .pitch import PitchProjector
from .smoothing import SpectrumSmoother

__all__ = [
    "StftFrames",
    "FFTPlan",
    "create_hann_window",
    "fft_in_place",
    "compute_stft_frames",
    "PitchProjector",
    "SpectrumSmoother",
]
