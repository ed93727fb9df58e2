"""Cross-cutting helpers shared by the MIDI tools."""
