"""Domain errors raised by services and translated to HTTP responses by the routes."""


class NotFoundError(LookupError):
    """A referenced record does not exist or belongs to another owner."""


class InsufficientBalanceError(ValueError):
    """A withdrawal exceeds the current balance of the ledger it draws from."""

    code = "insufficient_balance"

    def __init__(self, available, requested):
        self.available = available
        self.requested = requested
        super().__init__("Insufficient savings balance")


class CredentialsRequiredError(ValueError):
    """A destructive request arrived without mobile/password in its body."""


class InvalidCredentialsError(Exception):
    """Fresh credential proof did not match any stored account."""
