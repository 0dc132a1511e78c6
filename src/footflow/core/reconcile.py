from __future__ import annotations

"""Merge newly pushed snapshots into the held window.

The feed always pushes the full history.  In live-tail mode only its tail
matters, and :class:`Reconciler` decides between two effects by comparing
the last label of the snapshot with the last label of the held window:

* a different label means a new period started, so the window is
  *shifted* by one point;
* the same label means the running period was revised, so the last point
  is *patched* in place when its values changed.

Only one of the two runs per snapshot and the choice depends only on the
labels, which is why snapshots must be applied in arrival order.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..types import Snapshot, WindowMode
from ..utils.timeparse import InvalidLabelFormat, label_hours
from .window import WindowManager

logger = logging.getLogger(__name__)


class StaleSnapshotError(ValueError):
    """Raised when a snapshot arrives with an already applied sequence."""

    def __init__(self, sequence: int, last: int):
        self.sequence = sequence
        self.last = last
        super().__init__(
            f"snapshot sequence {sequence} is not newer than last applied {last}"
        )


class ReconcileAction(str, enum.Enum):
    INITIALIZE = "initialize"
    SHIFT = "shift"
    PATCH = "patch"
    NOOP = "noop"
    HELD = "held"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of applying one snapshot.

    Attributes
    ----------
    action:
        Which effect ran.  ``HELD`` means the manager is in range-select
        mode and only recorded the snapshot as its new history.
    changed:
        Names of locations whose held values changed.
    """

    action: ReconcileAction
    changed: Tuple[str, ...] = field(default_factory=tuple)


class Reconciler:
    """Apply snapshots to a :class:`WindowManager`, one at a time."""

    def __init__(self, manager: WindowManager):
        self.manager = manager
        self.last_sequence: Optional[int] = None

    def _check_sequence(self, snapshot: Snapshot) -> None:
        seq = snapshot.sequence
        if seq is None or self.last_sequence is None:
            return
        if seq <= self.last_sequence:
            logger.warning("rejecting stale snapshot %d (last %d)", seq, self.last_sequence)
            raise StaleSnapshotError(seq, self.last_sequence)

    def apply(self, snapshot: Snapshot) -> ReconcileResult:
        """Reconcile ``snapshot`` into the manager's window.

        The snapshot is validated before anything is touched; a length
        mismatch raises :class:`~footflow.types.SnapshotMismatchError` and
        an unparsable label raises
        :class:`~footflow.utils.timeparse.InvalidLabelFormat`.  Either way
        the window and history are left as they were.
        """

        self._check_sequence(snapshot)
        try:
            snapshot.validate()
        except ValueError:
            logger.warning("rejecting misaligned snapshot")
            raise
        try:
            label_hours(snapshot.labels)
        except InvalidLabelFormat as exc:
            logger.warning("rejecting snapshot with bad label %r", exc.label)
            raise

        manager = self.manager
        if not manager.initialized:
            manager.initialize(snapshot)
            result = ReconcileResult(ReconcileAction.INITIALIZE, tuple(manager.window.names()))
        elif manager.mode is WindowMode.RANGE_SELECT:
            manager.record(snapshot)
            result = ReconcileResult(ReconcileAction.HELD)
        elif not len(manager.window) or not len(snapshot):
            if not len(snapshot):
                # Nothing to shift in or patch with; keep the window.
                manager.record(snapshot)
                result = ReconcileResult(ReconcileAction.NOOP)
            else:
                manager.initialize(snapshot)
                result = ReconcileResult(
                    ReconcileAction.INITIALIZE, tuple(manager.window.names())
                )
        elif snapshot.last_label != manager.window.last_label:
            manager.shift(snapshot)
            changed = tuple(n for n in manager.window.names() if snapshot.get(n) is not None)
            result = ReconcileResult(ReconcileAction.SHIFT, changed)
        else:
            changed = tuple(manager.patch(snapshot))
            action = ReconcileAction.PATCH if changed else ReconcileAction.NOOP
            result = ReconcileResult(action, changed)

        if snapshot.sequence is not None:
            self.last_sequence = snapshot.sequence
        logger.debug("reconciled snapshot: %s %s", result.action.value, list(result.changed))
        return result


def reconcile(manager: WindowManager, snapshot: Snapshot) -> ReconcileResult:
    """Apply a single ``snapshot`` to ``manager`` without sequence tracking."""

    return Reconciler(manager).apply(snapshot)


__all__ = [
    "ReconcileAction",
    "ReconcileResult",
    "Reconciler",
    "StaleSnapshotError",
    "reconcile",
]
