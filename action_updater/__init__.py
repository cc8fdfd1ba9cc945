"""Bulk status/notes updater for SafetyCulture actions driven by a spreadsheet."""

__version__ = "0.1.0"
