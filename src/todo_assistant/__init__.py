"""Personal task tracker with a local LLM chat assistant."""

__version__ = "0.1.0"
