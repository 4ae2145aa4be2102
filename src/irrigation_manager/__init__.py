"""Irrigation Manager - control watering sections from the terminal.

This package provides:
- A Textual TUI for composing and editing irrigation sections
- Manual per-section timers synchronized with a realtime database
"""

__version__ = "0.1.0"
