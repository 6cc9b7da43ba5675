"""Per-process CPU and memory usage logger."""

__version__ = "1.0.1"
