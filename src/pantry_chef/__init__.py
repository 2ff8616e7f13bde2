"""Pantry Chef Service - AI-assisted recipe management API."""

__version__ = "1.0.0"
