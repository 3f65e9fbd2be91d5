"""Application exceptions."""


class AssistantUnavailableError(Exception):
    """Raised when the language model endpoint cannot produce a reply."""
