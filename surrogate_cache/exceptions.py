class SurrogateCacheError(Exception):
    """Base class for all surrogate cache errors."""


class PreconditionViolation(SurrogateCacheError, RuntimeError):
    """
    A header was touched in the wrong phase of the response lifecycle.

    This always indicates an ordering bug in the calling code.
    """


class HeaderAlreadySent(PreconditionViolation):
    """A header was sent twice, or onto a response that was already transmitted."""


class HeaderFinalizedError(PreconditionViolation):
    """A header or the per-response header state was mutated after finalization."""
