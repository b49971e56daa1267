"""
Exceptions raised by the triage core.
"""


class TriageError(Exception):
    """Base class for triage core errors."""


class InsufficientLabelsError(TriageError):
    """
    Raised when no label source is available at all (labels is None).

    Callers should treat this as the signal to run the fallback resolver,
    not as a computation error. An empty label list is NOT this case.
    """


class KeywordTableError(TriageError):
    """Raised when a keyword table file is missing or malformed."""
