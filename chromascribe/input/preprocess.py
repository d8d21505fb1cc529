"""Audio preprocessing - channel handling, peak normalization, HPSS placeholder."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..core.constants import DEFAULT_TARGET_PEAK
from ..core.errors import InvalidInputError

HPSS_PLACEHOLDER_WARNING = (
    "HPSS requested but not implemented yet. "
    "Using normalized mono audio as harmonic source."
)


@dataclass
class PreprocessResult:
    """Container for preprocessing output."""

    mono: np.ndarray
    normalized: np.ndarray
    harmonic: Optional[np.ndarray] = None
    percussive: Optional[np.ndarray] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def analysis_source(self) -> np.ndarray:
        """Buffer the rest of the chain should analyze."""
        return self.harmonic if self.harmonic is not None else self.normalized


def to_mono(audio: np.ndarray) -> np.ndarray:
    """
    Convert incoming PCM to a single channel.

    Only 1-D input is accepted for now; channel mixing has no agreed
    downmix rule yet, so multi-channel arrays are rejected.

    Raises:
        InvalidInputError: If audio has more than one dimension
    """
    audio = np.asarray(audio)
    if audio.ndim != 1:
        raise InvalidInputError(
            f"Multi-channel mixing is not implemented (got shape {audio.shape})"
        )
    return audio.copy()


def normalize_peak(audio: np.ndarray, target_peak: float = DEFAULT_TARGET_PEAK) -> np.ndarray:
    """Peak-normalize to target_peak. A silent buffer comes back as a zero copy."""
    if audio.size == 0:
        return audio.copy()

    peak = float(np.max(np.abs(audio)))
    if peak == 0:
        return audio.copy()

    return (audio * (target_peak / peak)).astype(audio.dtype, copy=False)


def run_hpss_placeholder(normalized: np.ndarray) -> Tuple[np.ndarray, np.ndarray, str]:
    """
    Stand-in for harmonic/percussive separation.

    Returns:
        Tuple of (harmonic = copy of input, percussive = silence, warning)
    """
    return normalized.copy(), np.zeros_like(normalized), HPSS_PLACEHOLDER_WARNING


def preprocess_audio(audio: np.ndarray, do_hpss: bool = False) -> PreprocessResult:
    """
    Run the preprocessing stage.

    Args:
        audio: 1-D sample buffer (any length, including 0)
        do_hpss: Produce the placeholder harmonic/percussive split

    Returns:
        PreprocessResult
    """
    mono = to_mono(audio)
    normalized = normalize_peak(mono)
    result = PreprocessResult(mono=mono, normalized=normalized)

    if do_hpss:
        harmonic, percussive, warning = run_hpss_placeholder(normalized)
        result.harmonic = harmonic
        result.percussive = percussive
        result.warnings.append(warning)

    return result
