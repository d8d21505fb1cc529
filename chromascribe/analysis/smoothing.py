"""Exponential moving average over successive magnitude spectra."""

from typing import Optional

import numpy as np


class SpectrumSmoother:
    """EMA smoother whose state belongs to the caller.

    Build one per analysis call; nothing is kept at module level, so
    concurrent analyses never see each other's history.
    """

    def __init__(self, alpha: float = 0.5):
        """
        Args:
            alpha: Weight of the newest spectrum in (0, 1]; lower is smoother
        """
        if not 0 < alpha <= 1:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self._state: Optional[np.ndarray] = None

    @property
    def initialized(self) -> bool:
        return self._state is not None

    def reset(self) -> None:
        self._state = None

    def update(self, spectrum: np.ndarray) -> np.ndarray:
        """
        Fold one spectrum into the running average and return a copy of it.

        The first spectrum seeds the state. Afterwards non-finite new values
        keep the old value, and non-finite old values take the new one.
        """
        spectrum = np.asarray(spectrum, dtype=float)

        if self._state is None or self._state.shape != spectrum.shape:
            self._state = spectrum.copy()
            return self._state.copy()

        old = self._state
        new_finite = np.isfinite(spectrum)
        old_finite = np.isfinite(old)

        with np.errstate(invalid="ignore", over="ignore"):
            blended = self.alpha * spectrum + (1 - self.alpha) * old
        self._state = np.where(
            ~new_finite, old, np.where(~old_finite, spectrum, blended)
        )
        return self._state.copy()

    def smooth_frames(self, spectra: np.ndarray) -> np.ndarray:
        """Run update() over each row of a [n_frames, n_bins] stack."""
        if len(spectra) == 0:
            return np.array(spectra, dtype=float, copy=True)
        return np.vstack([self.update(row) for row in spectra])
