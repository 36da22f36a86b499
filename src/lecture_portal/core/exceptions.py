class DomainError(Exception):
    """Base class for portal rule violations; controllers turn these into 4xx JSON replies."""


class ValidationError(DomainError):
    """Bad form input or a broken rule, e.g. a duplicate tag serial or an ended session."""


class AuthenticationError(DomainError):
    """Wrong email or password, or an account without a password."""


class AuthorizationError(DomainError):
    """The signed-in role may not perform this action."""
