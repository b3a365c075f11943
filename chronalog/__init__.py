"""Chronalog — git-backed changelog authoring."""

__version__ = "0.1.0"
