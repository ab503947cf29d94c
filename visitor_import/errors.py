"""
Error taxonomy for the log import.

Fatal errors (bad input, declined confirmation, broken registry) stop the
run. Line-level errors are caught at the per-line boundary of the pipeline
and turned into skipped results.
"""

from typing import Optional


class VisitorImportError(Exception):
    """Base class for all import errors."""

    fatal = True


class FatalInputError(VisitorImportError):
    """Invalid log directory, missing file or empty file set."""


class UserDeclinedError(VisitorImportError):
    """The pre-run confirmation was declined."""


class RegistryCreationError(VisitorImportError):
    """A new visitor could not be stored; the storage layer is broken."""

    def __init__(self, address: str, cause: Optional[BaseException] = None):
        self.address = address
        self.cause = cause
        super().__init__(f"Could not create visitor {address!r}: {cause}")


class LineParseError(VisitorImportError):
    """A single log line is malformed."""

    fatal = False

    def __init__(self, message: str, line: str = ""):
        self.line = line
        super().__init__(message)


class TransientPersistenceError(VisitorImportError):
    """Writing the visit or user agent for one line failed."""

    fatal = False
