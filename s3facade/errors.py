"""Error taxonomy shared by backends, adapters and decorators."""

from enum import Enum


class ErrorKind(Enum):
    """What went wrong, as far as a caller needs to know."""

    NOT_FOUND = "not-found"
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    ILLEGAL_USAGE = "illegal-usage"


class StorageError(Exception):
    """Failure of a storage operation, tagged with its kind.

    Backends classify every raw provider error into exactly one kind at
    their boundary; decorators propagate it unchanged.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(kind, message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    @classmethod
    def not_found(cls, message: str) -> "StorageError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def transient(cls, message: str) -> "StorageError":
        return cls(ErrorKind.TRANSIENT, message)

    @classmethod
    def permanent(cls, message: str) -> "StorageError":
        return cls(ErrorKind.PERMANENT, message)

    @classmethod
    def illegal(cls, message: str) -> "StorageError":
        return cls(ErrorKind.ILLEGAL_USAGE, message)


class ListingError(RuntimeError):
    """A listing page could not be fetched.

    No single key is implicated, so this is a state-level failure rather
    than a StorageError. The classified backend error is the ``__cause__``.
    """

    @property
    def kind(self) -> ErrorKind | None:
        cause = self.__cause__
        if isinstance(cause, StorageError):
            return cause.kind
        return None


def is_transient(exc: BaseException) -> bool:
    """Default retry predicate."""
    if isinstance(exc, StorageError):
        return exc.kind is ErrorKind.TRANSIENT
    if isinstance(exc, ListingError):
        return exc.kind is ErrorKind.TRANSIENT
    return False
