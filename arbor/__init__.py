"""Arbor: a folder tree of notes, each note an editable outline."""

__version__ = "0.1.0"
