"""Evaluations module — scoring employees against role requirements."""
