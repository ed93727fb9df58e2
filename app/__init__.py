"""Configuration and version helpers for the MIDI tools."""
