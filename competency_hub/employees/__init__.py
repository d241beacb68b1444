"""Employees module — employee records and their per-competency scores."""
