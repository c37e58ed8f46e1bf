"""Server side of the instant fence quote widget."""

__version__ = "1.0.0"
