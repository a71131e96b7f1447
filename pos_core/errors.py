from __future__ import annotations


class PosError(ValueError):
    """Base for business-rule failures; pages show str(e) to the operator."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class IncompleteClientInfo(PosError):
    pass


class InvalidProductLine(PosError):
    pass


class InsufficientInventory(PosError):
    pass


class IncompletePayment(PosError):
    pass


class InvalidTransition(PosError):
    pass


class NotFound(PosError):
    pass


class PreconditionViolation(PosError):
    pass


class IncompleteChangeInfo(PreconditionViolation):
    pass
