"""Roles module — job roles and the competencies each role requires."""
