"""Set of locations included in path scoring and the location overview."""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, Iterator, List

from ..types import LocationSeries, Window

logger = logging.getLogger(__name__)


class SelectionFilter:
    """Active location names with a floor of one member.

    Once the set holds at least one name, :meth:`toggle` never removes the
    last remaining one, so aggregates over the selection are never taken
    over an empty set.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._active: set[str] = set(names)

    def initialize(self, names: Iterable[str]) -> None:
        self._active = set(names)

    @property
    def active(self) -> FrozenSet[str]:
        return frozenset(self._active)

    def __contains__(self, name: object) -> bool:
        return name in self._active

    def __len__(self) -> int:
        return len(self._active)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._active))

    def toggle(self, name: str) -> bool:
        """Flip ``name`` in or out of the set.

        Returns ``True`` if the set changed.  Removing the only active
        name is ignored.
        """

        if name in self._active:
            if len(self._active) <= 1:
                logger.debug("ignoring toggle of last active location %r", name)
                return False
            self._active.remove(name)
        else:
            self._active.add(name)
        return True

    def apply(self, window: Window) -> List[LocationSeries]:
        """Return the window's active series in window order."""

        return [s for s in window.series if s.name in self._active]


__all__ = ["SelectionFilter"]
