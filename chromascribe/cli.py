"""Command-line interface for chromascribe.

Provides commands for:
- analyze: Notes, melody/harmony, chords, key and atonality; optional MIDI export
- info: Show audio file information
"""

from pathlib import Path
from typing import List, Optional

import librosa
import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="chromascribe",
    help="Offline audio to MIDI transcription and harmony analysis",
    rich_markup_mode="markdown",
)
console = Console()


def _load_audio(input_file: Path):
    """Load a file for analysis, exiting with an error message on failure."""
    from .input import AudioLoader

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    loader = AudioLoader()
    try:
        return loader, *loader.load(str(input_file))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file (WAV, FLAC, MP3, ...)"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output MIDI file path"
    ),
    hpss: bool = typer.Option(
        False, "--hpss", help="Request harmonic/percussive separation (placeholder)"
    ),
    melody: bool = typer.Option(
        True, "--melody/--no-melody", help="Extract the melody line"
    ),
    harmony: bool = typer.Option(
        True, "--harmony/--no-harmony", help="Extract harmony notes"
    ),
    chords: bool = typer.Option(
        True, "--chords/--no-chords", help="Infer the chord progression"
    ),
    atonal: bool = typer.Option(
        True, "--atonal/--no-atonal", help="Score atonality"
    ),
    resolution_ms: float = typer.Option(
        30.0, "--resolution-ms", help="Analysis time resolution in milliseconds"
    ),
    min_note_ms: float = typer.Option(
        80.0, "--min-note-ms", help="Minimum note duration in milliseconds"
    ),
    atonal_threshold: float = typer.Option(
        0.65, "--atonal-threshold", help="Score at or above which audio is atonal"
    ),
    smoothing: Optional[float] = typer.Option(
        None, "--smoothing", help="EMA alpha (0-1] applied to spectra before pitch projection"
    ),
    tempo: float = typer.Option(
        120.0, "-t", "--tempo", help="Tempo (BPM) used for MIDI export"
    ),
    ppq: int = typer.Option(
        480, "--ppq", help="MIDI ticks per quarter note"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Analyze an audio file: notes, melody/harmony, chords, key, atonality.

    Examples:
        chromascribe analyze audio.wav
        chromascribe analyze audio.wav -o out.mid --tempo 96
        chromascribe analyze audio.wav --no-chords --json
    """
    from .core import AnalysisOptions, InvalidInputError
    from .output import MIDIExporter, MidiExportOptions
    from .pipeline import analyze as run_analysis

    loader, audio, sr = _load_audio(input_file)

    try:
        options = AnalysisOptions(
            do_hpss=hpss,
            extract_melody=melody,
            extract_harmony=harmony,
            infer_chords=chords,
            detect_atonal=atonal,
            time_resolution_ms=resolution_ms,
            min_note_duration_ms=min_note_ms,
            atonal_threshold=atonal_threshold,
            spectral_smoothing=smoothing,
        )
        if not json_output:
            console.print(f"\n[bold]Analyzing:[/bold] {input_file.name}")
            console.print(f"  Duration: {loader.get_duration(audio, sr):.2f}s @ {sr} Hz")
        result = run_analysis(audio, sr, options)

        if output is not None:
            exporter = MIDIExporter(MidiExportOptions(tempo_bpm=tempo, ppq=ppq))
            exporter.export(result, str(output))
    except InvalidInputError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        data = result.to_dict()
        data["input_file"] = str(input_file)
        data["sample_rate"] = sr
        data["warnings"] = list(result.debug.warnings) if result.debug else []
        if output is not None:
            data["output_file"] = str(output)
        console.print_json(data=data)
        return

    for warning in (result.debug.warnings if result.debug else []):
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    key = result.key_estimate
    if key is not None:
        console.print(
            f"  Key: [cyan]{key.label}[/cyan] (confidence: {key.confidence:.2f}, "
            f"relative: {key.relative_key})"
        )
    else:
        console.print("  Key: [dim]none[/dim]")

    verdict = "[red]atonal[/red]" if result.is_atonal else "[green]tonal[/green]"
    console.print(f"  Atonality: {result.atonal_score:.2f} ({verdict})")
    console.print(
        f"  Notes: {len(result.notes)} "
        f"(melody {len(result.melody_notes)}, harmony {len(result.harmony_notes)})"
    )

    if result.chords:
        _show_chords_table(result.chords)
    if result.notes:
        _show_notes_table(result.melody_notes or result.notes)

    if output is not None:
        console.print(f"\n[green]MIDI written to {output}[/green]")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
):
    """Show information about an audio file."""
    loader, audio, sr = _load_audio(input_file)

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    console.print(f"  Duration: {loader.get_duration(audio, sr):.2f} seconds")
    console.print(f"  Sample rate: {sr} Hz")
    console.print(f"  Samples: {len(audio):,}")


def _show_chords_table(chords):
    """Display chords in a table."""
    table = Table(title="Chords")
    table.add_column("Chord", style="cyan")
    table.add_column("Start (s)", style="green")
    table.add_column("Duration (s)", style="yellow")
    table.add_column("Confidence", style="magenta")

    for chord in chords:
        table.add_row(
            chord.label,
            f"{chord.start_sec:.2f}",
            f"{chord.duration_sec:.2f}",
            f"{chord.confidence:.2f}",
        )

    console.print(table)


def _show_notes_table(notes, limit: int = 20):
    """Display notes in a table."""
    table = Table(title="Notes")
    table.add_column("Pitch", style="cyan")
    table.add_column("Onset (s)", style="green")
    table.add_column("Duration (s)", style="yellow")
    table.add_column("Velocity", style="magenta")

    shown: List = list(notes)[:limit]
    for note in shown:
        table.add_row(
            librosa.midi_to_note(note.pitch_midi),
            f"{note.start_sec:.3f}",
            f"{note.duration_sec:.3f}",
            str(note.velocity if note.velocity is not None else "-"),
        )

    console.print(table)
    if len(notes) > limit:
        console.print(f"  ... and {len(notes) - limit} more")


def main():
    app()


if __name__ == "__main__":
    main()
