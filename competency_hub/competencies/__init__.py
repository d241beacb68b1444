"""Competencies module — the competency catalogue."""
