from __future__ import annotations


class InvariantViolation(RuntimeError):
    """A detector broke one of its own guarantees.

    Raised for defects in the reconstruction code, never for odd data.
    """
