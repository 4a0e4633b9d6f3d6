"""botsense: classify AI agent, crawler and AI-referrer traffic."""

__version__ = "0.1.0"
