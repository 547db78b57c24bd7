class DomainError(Exception):
    """Base class for all domain-level errors."""

    default_message = "operation rejected"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DomainError):
    """A user, session or ban the operation targets does not exist."""

    default_message = "not found"


class UserNotFound(NotFound):
    default_message = "User not found"


class SessionNotFound(NotFound):
    """Also raised for revoked sessions: they behave as if absent."""

    default_message = "Session not found"


class BanNotFound(NotFound):
    default_message = "Ban not found"


class InvalidOperation(DomainError):
    """The caller asked for something the current state does not allow."""

    default_message = "invalid operation"


class InvalidCode(InvalidOperation):
    """Wrong, expired, unknown or already consumed verification code."""

    default_message = "Invalid code"


class SelfTargetedAction(InvalidOperation):
    """An admin tried to ban or unban their own account."""

    default_message = "You can't target yourself"


class UnknownRole(InvalidOperation):
    default_message = "Role doesn't exist"


class RoleAlreadyAssigned(InvalidOperation):
    default_message = "User already has this role"


class RoleNotAssigned(InvalidOperation):
    default_message = "User doesn't have this role"


class EmailAlreadyConfirmed(InvalidOperation):
    default_message = "Email is already confirmed"


class EmailAlreadyRegistered(InvalidOperation):
    default_message = "User with this email already exists"


class AccessDenied(DomainError):
    """The target exists but does not belong to the acting user."""

    default_message = "access denied"


class LoginBanned(AccessDenied):
    default_message = "Login is banned for this account"


class OperationFailed(DomainError):
    """The store did not acknowledge a write."""

    default_message = "operation failed"
