"""Claude Context Bar - infer live Claude Code sessions from their logs."""

__version__ = "0.1.0"
