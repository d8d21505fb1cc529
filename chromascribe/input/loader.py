"""Audio file loading for the command line.

The analysis core only ever sees decoded sample buffers; this is the host
side that produces them.
"""

import numpy as np
import librosa
from pathlib import Path
from typing import Tuple, Optional


class AudioLoader:
    """Loads audio files into float32 mono buffers."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        mono: bool = True,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Resample to this rate; None keeps the file's native rate
            mono: Downmix to mono if True
        """
        self.target_sr = target_sr
        self.mono = mono

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load an audio file.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (float32 audio array, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        audio, sr = librosa.load(
            str(path),
            sr=self.target_sr,
            mono=self.mono,
        )

        return np.ascontiguousarray(audio, dtype=np.float32), int(sr)

    def get_duration(self, audio: np.ndarray, sr: int) -> float:
        """Get duration in seconds."""
        return float(librosa.get_duration(y=audio, sr=sr))
