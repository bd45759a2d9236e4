class DomainError(Exception):
    """Base class for domain-level exceptions."""


class ValidationError(DomainError):
    pass


class DuplicateIdentity(DomainError):
    pass


class PostNotFound(DomainError):
    pass


class CommentNotFound(DomainError):
    pass


class Forbidden(DomainError):
    """Caller is not the author of the resource it tries to mutate."""


class AlreadyLiked(DomainError):
    pass


class NotLiked(DomainError):
    pass


class Conflict(DomainError):
    """The stored post changed since it was loaded."""


class Unauthorized(DomainError):
    pass


class MissingToken(Unauthorized):
    pass


class InvalidToken(Unauthorized):
    pass
