"""Session-backed authentication for a web community platform."""

__version__ = "1.0.0"
