"""Exception hierarchy shared by the pipeline stages."""

from __future__ import annotations


class PixelMarkovError(Exception):
    """Base class for all package errors."""


class ValidationError(PixelMarkovError, ValueError):
    """Bad user-supplied parameters (dimensions, colour count, image list)."""


class ModelNotReadyError(PixelMarkovError, RuntimeError):
    """Synthesis was requested before a transition model was learned."""


class PreconditionViolation(PixelMarkovError):
    """A stage was called in breach of its contract.

    Raised by the core stages themselves; callers are expected to let it
    abort the run.
    """
