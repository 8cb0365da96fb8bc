"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and report them.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ConcurrencyConflictError(DomainException):
    """The order changed between read and write.

    Callers should re-read and re-validate rather than resubmit the same
    request.
    """


class PaymentProcessorError(DomainException):
    """The payment processor rejected or failed a request."""

    def __init__(self, message: str, *, declined: bool = False, detail: str | None = None) -> None:
        super().__init__(message)
        self.declined = declined
        self.detail = detail
