"""Core types and constants for chromascribe."""

from .constants import (
    PITCH_NAMES,
    DEFAULT_FRAME_SIZE,
    DEFAULT_TEMPO,
    DEFAULT_PPQ,
)
from .errors import ChromascribeError, InvalidInputError
from .events import NoteEvent, ChordEvent, ChordQuality, KeyEstimate
from .options import (
    AnalysisOptions,
    AnalysisResult,
    AnalysisDebugInfo,
    PreprocessSummary,
    DEFAULT_ANALYSIS_OPTIONS,
    merge_analysis_options,
    create_empty_analysis_result,
)

__all__ = [
    "PITCH_NAMES",
    "DEFAULT_FRAME_SIZE",
    "DEFAULT_TEMPO",
    "DEFAULT_PPQ",
    "ChromascribeError",
    "InvalidInputError",
    "NoteEvent",
    "ChordEvent",
    "ChordQuality",
    "KeyEstimate",
    "AnalysisOptions",
    "AnalysisResult",
    "AnalysisDebugInfo",
    "PreprocessSummary",
    "DEFAULT_ANALYSIS_OPTIONS",
    "merge_analysis_options",
    "create_empty_analysis_result",
]
