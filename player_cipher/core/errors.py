"""Exceptions raised by the player cipher pipeline."""


class ExtractionError(Exception):
    """Raised when player functions cannot be fetched or extracted."""

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


class EvaluationError(Exception):
    """Raised when an extracted program faults inside the sandbox."""

    def __init__(self, message: str, entrypoint: str | None = None):
        super().__init__(message)
        self.entrypoint = entrypoint
