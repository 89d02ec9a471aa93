"""pinbot — Discord message pin/unpin bot."""

__version__ = "0.1.0"
