"""Output layer - Export to MIDI.

This layer serializes analysis results as Standard MIDI Files.
"""

from .midi import MIDIExporter, MidiExportOptions, export_to_midi, encode_vlq

__all__ = [
    "MIDIExporter",
    "MidiExportOptions",
    "export_to_midi",
    "encode_vlq",
]
