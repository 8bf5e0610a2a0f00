# src/a11y_auditor/errors.py


class AuditError(Exception):
    """Base class for errors that abort an audit run."""


class MalformedTree(AuditError):
    """
    The node tree handed to the engine violates its structural preconditions
    (a cycle, or a child whose parent link points at a different node).
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class InvalidOptions(AuditError):
    """Raised before traversal when the audit options cannot be understood."""
