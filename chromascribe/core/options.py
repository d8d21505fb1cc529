"""Analysis options and the aggregate result container."""

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import InvalidInputError
from .events import ChordEvent, KeyEstimate, NoteEvent


@dataclass(frozen=True)
class AnalysisOptions:
    """Controls for one ``analyze`` call.

    Attributes:
        do_hpss: Request harmonic/percussive separation (placeholder, no-op)
        extract_melody: Populate ``melody_notes``
        extract_harmony: Populate ``harmony_notes``
        infer_chords: Run chord inference
        detect_atonal: Run the atonality scorer
        time_resolution_ms: Hop length and tracker/splitter frame width
        min_note_duration_ms: Shorter tracked notes are discarded
        atonal_threshold: Score at or above which the result is atonal
        spectral_smoothing: EMA alpha in (0, 1] applied to magnitude spectra
            before pitch projection; None disables smoothing
    """

    do_hpss: bool = False
    extract_melody: bool = True
    extract_harmony: bool = True
    infer_chords: bool = True
    detect_atonal: bool = True
    time_resolution_ms: float = 30.0
    min_note_duration_ms: float = 80.0
    atonal_threshold: float = 0.65
    spectral_smoothing: Optional[float] = None


DEFAULT_ANALYSIS_OPTIONS = AnalysisOptions()

# camelCase spellings accepted by merge_analysis_options
_OPTION_ALIASES = {
    "doHPSS": "do_hpss",
    "extractMelody": "extract_melody",
    "extractHarmony": "extract_harmony",
    "inferChords": "infer_chords",
    "detectAtonal": "detect_atonal",
    "timeResolutionMs": "time_resolution_ms",
    "minNoteDurationMs": "min_note_duration_ms",
    "atonalThreshold": "atonal_threshold",
    "spectralSmoothing": "spectral_smoothing",
}


def merge_analysis_options(
    options: Union[None, AnalysisOptions, Mapping[str, Any]] = None,
) -> AnalysisOptions:
    """
    Merge caller options over the documented defaults.

    Args:
        options: None, a complete AnalysisOptions, or a mapping of overrides
            (snake_case or camelCase keys)

    Returns:
        A new frozen AnalysisOptions

    Raises:
        InvalidInputError: On unknown keys or out-of-range values
    """
    if options is None:
        merged = DEFAULT_ANALYSIS_OPTIONS
    elif isinstance(options, AnalysisOptions):
        merged = options
    elif isinstance(options, Mapping):
        known = {f.name for f in fields(AnalysisOptions)}
        overrides = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise InvalidInputError(f"Unknown analysis option: {key!r}")
            overrides[name] = value
        merged = replace(DEFAULT_ANALYSIS_OPTIONS, **overrides)
    else:
        raise InvalidInputError(
            f"options must be a mapping or AnalysisOptions, got {type(options).__name__}"
        )

    _validate_options(merged)
    return merged


def _validate_options(options: AnalysisOptions) -> None:
    if not _is_finite_number(options.time_resolution_ms) or options.time_resolution_ms <= 0:
        raise InvalidInputError("time_resolution_ms must be a positive number")
    if not _is_finite_number(options.min_note_duration_ms) or options.min_note_duration_ms < 0:
        raise InvalidInputError("min_note_duration_ms must be a non-negative number")
    if not _is_finite_number(options.atonal_threshold):
        raise InvalidInputError("atonal_threshold must be a finite number")
    alpha = options.spectral_smoothing
    if alpha is not None and (not _is_finite_number(alpha) or not 0 < alpha <= 1):
        raise InvalidInputError("spectral_smoothing must be in (0, 1] or None")


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


@dataclass
class PreprocessSummary:
    """Sample counts and flags from the preprocessing stage."""

    input_samples: int = 0
    normalized_samples: int = 0
    used_hpss: bool = False


@dataclass
class AnalysisDebugInfo:
    """Diagnostic detail attached to an AnalysisResult."""

    frame_times_sec: List[float] = field(default_factory=list)
    chroma: List[List[float]] = field(default_factory=list)
    chord_window_scores: List[Dict[str, float]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    preprocess: Optional[PreprocessSummary] = None
    atonality_factors: Dict[str, float] = field(default_factory=dict)


@dataclass
class AnalysisResult:
    """Everything one ``analyze`` call produces. Owned by the caller."""

    notes: List[NoteEvent] = field(default_factory=list)
    melody_notes: List[NoteEvent] = field(default_factory=list)
    harmony_notes: List[NoteEvent] = field(default_factory=list)
    chords: List[ChordEvent] = field(default_factory=list)
    key_estimate: Optional[KeyEstimate] = None
    atonal_score: float = 1.0
    is_atonal: bool = True
    debug: Optional[AnalysisDebugInfo] = None

    def to_dict(self, include_debug: bool = False) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        data: Dict[str, Any] = {
            "notes": [n.to_dict() for n in self.notes],
            "melody_notes": [n.to_dict() for n in self.melody_notes],
            "harmony_notes": [n.to_dict() for n in self.harmony_notes],
            "chords": [c.to_dict() for c in self.chords],
            "key_estimate": self.key_estimate.to_dict() if self.key_estimate else None,
            "atonal_score": self.atonal_score,
            "is_atonal": self.is_atonal,
        }
        if include_debug and self.debug is not None:
            data["debug"] = {
                "frame_times_sec": self.debug.frame_times_sec,
                "chroma": self.debug.chroma,
                "chord_window_scores": self.debug.chord_window_scores,
                "warnings": self.debug.warnings,
                "preprocess": (
                    vars(self.debug.preprocess) if self.debug.preprocess else None
                ),
                "atonality_factors": self.debug.atonality_factors,
            }
        return data


def create_empty_analysis_result() -> AnalysisResult:
    """Result for a buffer with no usable content: no events, atonal by default."""
    return AnalysisResult(debug=AnalysisDebugInfo())
