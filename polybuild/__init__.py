"""Detect a repository's platform and compose the script that builds it."""

__version__ = "0.1.0"
