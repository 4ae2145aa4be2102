"""Irrigation Manager User App (TUI).

Interactive Textual TUI application for managing irrigation sections:
composing watering schedules, editing and deleting sections, and running
manual per-section timers whose progress is stored in a realtime database.
"""

__version__ = "0.1.0"
