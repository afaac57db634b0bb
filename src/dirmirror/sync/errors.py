"""Exceptions raised by the mirror engine.

Only conditions that make a run impossible are exceptions.  Per-item
delete, create and copy failures are recorded as failed
``OperationRecord`` values instead and never propagate.
"""

from __future__ import annotations


class MirrorError(Exception):
    """Base class for all dirmirror errors."""


class ScanError(MirrorError):
    """A tree root could not be scanned.

    Attributes:
        root: The root path that failed.
        reason: Human-readable description of the failure.
    """

    def __init__(self, root: str, reason: str) -> None:
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot scan {root}: {reason}")
