"""Transcription layer - Note-level detection from spectral frames."""

from .tracker import NoteTracker, TranscriptionResult, transcribe, hop_size_for

__all__ = ["NoteTracker", "TranscriptionResult", "transcribe", "hop_size_for"]
