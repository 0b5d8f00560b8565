"""Text notes stored as files in a directory, served over HTTP."""

__version__ = "1.0.0"
