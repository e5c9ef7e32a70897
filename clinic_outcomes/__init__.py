"""Clinic Outcomes - population glucose outcomes dashboard."""

__version__ = "1.0.0"
