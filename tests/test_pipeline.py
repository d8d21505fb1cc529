"""End-to-end tests for analyze()."""

import json

import numpy as np
import pytest

from chromascribe import analyze, export_to_midi
from chromascribe.core import AnalysisOptions, InvalidInputError, merge_analysis_options
from chromascribe.input.preprocess import HPSS_PLACEHOLDER_WARNING
from chromascribe.pipeline import ATONAL_DISABLED_WARNING

from generate_test_audio import generate_chord, generate_sine_wave, midi_to_hz

SR = 22050


@pytest.fixture(scope="module")
def a4_audio():
    return generate_sine_wave(440.0, 1.0, SR)


@pytest.fixture(scope="module")
def c_major_audio():
    return generate_chord([midi_to_hz(60), midi_to_hz(64), midi_to_hz(67)], 1.5, SR)


class TestInputValidation:
    @pytest.mark.parametrize("audio", [
        [0.0, 0.1, 0.2],
        np.zeros(100, dtype=np.float64),
        np.zeros(100, dtype=np.int16),
        np.zeros((2, 100), dtype=np.float32),
        None,
    ])
    def test_bad_audio(self, audio):
        with pytest.raises(InvalidInputError):
            analyze(audio, SR)

    @pytest.mark.parametrize("sample_rate", [0, -44100, float("nan"), float("inf"), "44100", True, None])
    def test_bad_sample_rate(self, sample_rate):
        with pytest.raises(InvalidInputError):
            analyze(np.zeros(100, dtype=np.float32), sample_rate)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            analyze(np.zeros(100, dtype=np.float64), SR)


class TestOptions:
    def test_defaults(self):
        options = merge_analysis_options(None)
        assert options == AnalysisOptions()
        assert options.time_resolution_ms == 30.0
        assert options.atonal_threshold == 0.65

    def test_camel_case_keys(self):
        options = merge_analysis_options({"timeResolutionMs": 20, "doHPSS": True})
        assert options.time_resolution_ms == 20
        assert options.do_hpss is True
        assert options.extract_melody is True

    @pytest.mark.parametrize("overrides", [
        {"unknown": 1},
        {"time_resolution_ms": 0},
        {"min_note_duration_ms": -5},
        {"atonal_threshold": float("nan")},
        {"spectral_smoothing": 0.0},
        {"spectral_smoothing": 2.0},
    ])
    def test_rejected(self, overrides):
        with pytest.raises(InvalidInputError):
            merge_analysis_options(overrides)

    def test_rejected_by_analyze(self):
        with pytest.raises(InvalidInputError):
            analyze(np.zeros(100, dtype=np.float32), SR, {"bogus": True})


class TestDegenerateInput:
    def test_empty_buffer(self):
        result = analyze(np.zeros(0, dtype=np.float32), SR)

        assert result.notes == []
        assert result.melody_notes == []
        assert result.harmony_notes == []
        assert result.chords == []
        assert result.key_estimate is None
        assert result.atonal_score == 1.0
        assert result.is_atonal
        assert result.debug.frame_times_sec == []

    def test_silent_buffer(self):
        result = analyze(np.zeros(SR, dtype=np.float32), SR)

        assert result.notes == []
        assert not np.any(result.debug.chroma)
        assert 0.0 <= result.atonal_score <= 1.0

    def test_single_sample(self):
        result = analyze(np.array([0.5], dtype=np.float32), SR)
        assert len(result.debug.frame_times_sec) == 1


class TestAnalyze:
    """End-to-end analysis of synthetic audio."""

    def test_sine_a4(self, a4_audio):
        result = analyze(a4_audio, SR)

        assert 69 in [n.pitch_midi for n in result.notes]
        assert 69 in [n.pitch_midi for n in result.melody_notes]
        assert result.key_estimate is not None
        assert len(result.debug.frame_times_sec) == len(result.debug.chroma)

    def test_note_fields(self, a4_audio):
        for note in analyze(a4_audio, SR).notes:
            assert 36 <= note.pitch_midi <= 96
            assert note.duration_sec >= 0.08
            assert 0.0 <= note.confidence <= 1.0
            assert 50 <= note.velocity <= 120

    def test_c_major_triad(self, c_major_audio):
        result = analyze(c_major_audio, SR)
        pitches = {n.pitch_midi for n in result.notes}

        assert {60, 64, 67} <= pitches
        assert 67 in [n.pitch_midi for n in result.melody_notes]
        assert 60 in [n.pitch_midi for n in result.harmony_notes]

        assert result.chords
        first = result.chords[0]
        assert {0, 4, 7} <= set(first.quality.pitch_classes(first.root_pitch_class))

    def test_notes_partitioned(self, c_major_audio):
        result = analyze(c_major_audio, SR)
        assert len(result.melody_notes) + len(result.harmony_notes) == len(result.notes)

    def test_hpss_placeholder(self, a4_audio):
        plain = analyze(a4_audio, SR)
        result = analyze(a4_audio, SR, {"do_hpss": True})

        assert HPSS_PLACEHOLDER_WARNING in result.debug.warnings
        assert result.debug.preprocess.used_hpss
        assert result.notes == plain.notes

    def test_stage_flags(self, a4_audio):
        result = analyze(a4_audio, SR, {
            "extract_melody": False,
            "extract_harmony": False,
            "infer_chords": False,
            "detect_atonal": False,
        })

        assert result.notes
        assert result.melody_notes == []
        assert result.harmony_notes == []
        assert result.chords == []
        assert result.atonal_score == 1.0
        assert result.is_atonal
        assert ATONAL_DISABLED_WARNING in result.debug.warnings

    def test_spectral_smoothing(self, a4_audio):
        result = analyze(a4_audio, SR, {"spectral_smoothing": 0.5})
        assert 69 in [n.pitch_midi for n in result.notes]

    def test_does_not_modify_input(self, a4_audio):
        before = a4_audio.copy()
        analyze(a4_audio, SR, {"do_hpss": True})
        np.testing.assert_array_equal(a4_audio, before)

    def test_deterministic(self, c_major_audio):
        first = analyze(c_major_audio, SR)
        second = analyze(c_major_audio, SR)
        assert first.to_dict() == second.to_dict()
        assert export_to_midi(first) == export_to_midi(second)

    def test_to_dict_is_json_ready(self, c_major_audio):
        data = analyze(c_major_audio, SR).to_dict(include_debug=True)
        decoded = json.loads(json.dumps(data))

        assert set(decoded) >= {"notes", "chords", "key_estimate", "atonal_score", "debug"}
        assert decoded["debug"]["preprocess"]["input_samples"] == len(c_major_audio)
