"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from chromascribe.cli import app

from generate_test_audio import generate_sine_wave, write_wav

runner = CliRunner()


@pytest.fixture
def wav_file(tmp_path):
    path = tmp_path / "a4.wav"
    write_wav(path, generate_sine_wave(440.0, 1.0, 22050), 22050)
    return path


def parse_json(output: str) -> dict:
    return json.loads(output[output.index("{"):output.rindex("}") + 1])


class TestAnalyzeCommand:
    def test_json_output(self, wav_file):
        result = runner.invoke(app, ["analyze", str(wav_file), "--json"])

        assert result.exit_code == 0, result.output
        data = parse_json(result.output)
        assert data["sample_rate"] == 22050
        assert 69 in [n["pitch_midi"] for n in data["notes"]]

    def test_writes_midi(self, wav_file, tmp_path):
        out = tmp_path / "out" / "a4.mid"
        result = runner.invoke(app, ["analyze", str(wav_file), "-o", str(out), "--tempo", "90"])

        assert result.exit_code == 0, result.output
        assert out.read_bytes()[:4] == b"MThd"

    def test_hpss_warning_in_json(self, wav_file):
        result = runner.invoke(app, ["analyze", str(wav_file), "--hpss", "--json"])
        assert result.exit_code == 0, result.output
        assert parse_json(result.output)["warnings"]

    def test_human_output(self, wav_file):
        result = runner.invoke(app, ["analyze", str(wav_file)])
        assert result.exit_code == 0, result.output
        assert "Key:" in result.output
        assert "relative:" in result.output
        assert "Atonality:" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1

    def test_invalid_option_value(self, wav_file):
        result = runner.invoke(app, ["analyze", str(wav_file), "--resolution-ms", "0"])
        assert result.exit_code == 1

    def test_non_finite_tempo(self, wav_file, tmp_path):
        out = tmp_path / "a4.mid"
        result = runner.invoke(app, ["analyze", str(wav_file), "-o", str(out), "--tempo", "nan"])
        assert result.exit_code == 1
        assert not out.exists()


class TestInfoCommand:
    def test_info(self, wav_file):
        result = runner.invoke(app, ["info", str(wav_file)])
        assert result.exit_code == 0, result.output
        assert "22050" in result.output
