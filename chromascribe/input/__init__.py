"""Input layer - Preprocessing of decoded buffers and file loading."""

from .preprocess import (
    PreprocessResult,
    preprocess_audio,
    normalize_peak,
    to_mono,
    run_hpss_placeholder,
)
from .loader import AudioLoader

__all__ = [
    "PreprocessResult",
    "preprocess_audio",
    "normalize_peak",
    "to_mono",
    "run_hpss_placeholder",
    "AudioLoader",
]
