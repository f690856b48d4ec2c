"""liftlog: progression and insights analytics for a strength-training log."""

__version__ = "0.3.0"
