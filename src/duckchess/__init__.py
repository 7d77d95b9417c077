"""Duck chess move generation and resumable game search."""

__version__ = "0.1.0"
