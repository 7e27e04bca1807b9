"""Export-Modul: Terminal-Darstellung (Rich) für Klassen- und Lehrerpläne."""

from export.tui_renderer import build_table, render_class_rows, render_teacher_rows

__all__ = ["build_table", "render_class_rows", "render_teacher_rows"]
