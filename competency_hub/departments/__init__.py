"""Departments module — organisational units employees and HODs belong to."""
