"""Competency Hub — competency management API and client."""

__version__ = "1.0.0"
