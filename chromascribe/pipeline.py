"""Offline analysis pipeline.

Wires the stages in order for one complete buffer:

    preprocess -> STFT -> chroma / semitone energy -> note tracking
        -> melody/harmony split -> chord inference -> key -> atonality

Every call builds its own intermediate buffers and state; nothing is
shared between calls.
"""

import math
import numbers
from typing import Any, Mapping, Optional, Union

import numpy as np

from .core.errors import InvalidInputError
from .core.options import (
    AnalysisOptions,
    AnalysisResult,
    PreprocessSummary,
    create_empty_analysis_result,
    merge_analysis_options,
)
from .inference.atonality import AtonalityScorer
from .inference.chords import ChordAnalyzer
from .inference.key import KeyDetector
from .inference.melody import MelodyHarmonySplitter
from .input.preprocess import preprocess_audio
from .transcription import transcribe

ATONAL_DISABLED_WARNING = "Atonality detection disabled; atonal_score left at its default."


def validate_input(audio: Any, sample_rate: Any) -> None:
    """
    Check the entry arguments.

    Raises:
        InvalidInputError: If audio is not a 1-D float32 numpy array, or
            sample_rate is not a finite number > 0
    """
    if not isinstance(audio, np.ndarray) or audio.dtype != np.float32:
        raise InvalidInputError("audio must be a numpy array of float32 samples")
    if audio.ndim != 1:
        raise InvalidInputError(f"audio must be a flat 1-D array, got shape {audio.shape}")

    if isinstance(sample_rate, bool) or not isinstance(sample_rate, numbers.Real):
        raise InvalidInputError("sample_rate must be a positive number")
    if not math.isfinite(sample_rate) or sample_rate <= 0:
        raise InvalidInputError("sample_rate must be a positive number")


def analyze(
    audio: np.ndarray,
    sample_rate: float,
    options: Union[None, AnalysisOptions, Mapping[str, Any]] = None,
) -> AnalysisResult:
    """
    Transcribe and analyze one complete mono buffer.

    Args:
        audio: 1-D float32 samples
        sample_rate: Sample rate in Hz
        options: Overrides merged over the defaults (see AnalysisOptions)

    Returns:
        AnalysisResult with notes, melody/harmony, chords, key estimate,
        atonality and debug detail

    Raises:
        InvalidInputError: On malformed audio, sample rate or options
    """
    validate_input(audio, sample_rate)
    opts = merge_analysis_options(options)
    sample_rate = float(sample_rate)

    result = create_empty_analysis_result()
    debug = result.debug

    # Stage 1: preprocessing
    prepared = preprocess_audio(audio, do_hpss=opts.do_hpss)
    debug.warnings.extend(prepared.warnings)
    debug.preprocess = PreprocessSummary(
        input_samples=int(audio.shape[0]),
        normalized_samples=int(prepared.normalized.shape[0]),
        used_hpss=opts.do_hpss,
    )

    # Stage 2: spectra, chroma, notes
    transcription = transcribe(prepared.analysis_source, sample_rate, opts)
    result.notes = transcription.notes
    chroma = transcription.chroma
    frame_times = transcription.frame_times_sec
    debug.frame_times_sec = list(frame_times)
    debug.chroma = chroma.tolist()

    # Stage 3: melody/harmony
    if opts.extract_melody or opts.extract_harmony:
        splitter = MelodyHarmonySplitter(
            time_resolution_ms=opts.time_resolution_ms,
            extract_melody=opts.extract_melody,
            extract_harmony=opts.extract_harmony,
        )
        split = splitter.split(result.notes)
        result.melody_notes = split.melody_notes
        result.harmony_notes = split.harmony_notes

    # Stage 4: chords
    if opts.infer_chords:
        inference = ChordAnalyzer().infer(chroma, frame_times)
        result.chords = inference.chords
        debug.chord_window_scores = inference.window_scores

    # Stage 5: key
    result.key_estimate = KeyDetector().estimate(chroma)

    # Stage 6: atonality
    if opts.detect_atonal:
        scored = AtonalityScorer(threshold=opts.atonal_threshold).score(
            result.key_estimate, result.chords, chroma
        )
        result.atonal_score = scored.atonal_score
        result.is_atonal = scored.is_atonal
        debug.atonality_factors = scored.factors
    else:
        debug.warnings.append(ATONAL_DISABLED_WARNING)

    return result
