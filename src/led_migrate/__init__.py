"""Move volume data into and out of a Lemmy-Easy-Deploy installation."""

__version__ = "0.1.0"
