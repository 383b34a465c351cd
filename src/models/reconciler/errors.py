"""Exceptions raised by the reconciliation layer."""


class ConfigurationError(ValueError):
    """A match configuration is unusable."""


class ReferenceUnavailableError(LookupError):
    """The reference table behind a lookup field could not be retrieved."""

    def __init__(self, reference_id, message=None):
        self.reference_id = reference_id
        super().__init__(message or f"Reference data not found for {reference_id}")


class LookupProcessingError(RuntimeError):
    """Raised by fail-fast lookup processing at the first row error."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = list(errors or [])
