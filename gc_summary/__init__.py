"""GrooveCoaster play summary digest."""

__version__ = "0.3.0"
