"""BigTimer: big, focus-friendly countdown timers and routines."""

__version__ = "0.1.0"
