"""
Error types shared by the repositories and services.

Only ValidationFailure, RecordNotFound, EditConflict and DuplicateRecord are
expected outcomes; the rest surface to clients as a generic server error.
"""

from __future__ import annotations


class ValidationFailure(Exception):
    """
    Every violated constraint of one submission, keyed by field name.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__(", ".join(f"{k}: {v}" for k, v in self.errors.items()))


class RecordNotFound(LookupError):
    def __init__(self, message: str = "record not found"):
        super().__init__(message)


class EditConflict(Exception):
    def __init__(self, message: str = "edit conflict"):
        super().__init__(message)


class BackendFault(RuntimeError):
    """
    Connectivity, timeout or driver failure. The message is deliberately
    generic; the cause is chained and logged where it is raised.
    """

    def __init__(self, message: str = "backend failure"):
        super().__init__(message)


class DuplicateRecord(BackendFault):
    def __init__(self, constraint: str | None = None):
        self.constraint = constraint
        super().__init__("duplicate record")


class CredentialGenerationFault(RuntimeError):
    pass


class InvariantViolation(RuntimeError):
    """
    A broken precondition inside the service, never caused by client input.
    """
