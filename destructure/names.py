"""Fresh-name allocation for generated temporaries."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from . import constants
from .errors import NameAllocationError

logger = logging.getLogger(__name__)


class NameAllocator(ABC):
    """Hands out identifiers that collide with nothing live in one scope.

    Callers must allocate in emission order: a name handed out earlier is
    taken for every later request against the same allocator.
    """

    @abstractmethod
    def allocate(self, hint: str) -> str: ...

    @abstractmethod
    def reserve(self, names: Iterable[str]) -> None: ...


class ScopeNameAllocator(NameAllocator):
    """Set-backed allocator for a single lexical scope.

    Returns *hint* itself when free, else the hint with the smallest free
    integer suffix (``array``, ``array1``, ``array2``, ...).  Not thread-safe;
    give each independently lowered unit (or scope) its own instance.
    """

    def __init__(
        self,
        taken: Iterable[str] = (),
        max_suffix: int = constants.MAX_NAME_SUFFIX,
    ):
        self._taken: set[str] = set(taken)
        self._max_suffix = max_suffix

    @property
    def taken(self) -> frozenset[str]:
        return frozenset(self._taken)

    def reserve(self, names: Iterable[str]) -> None:
        self._taken.update(names)

    def allocate(self, hint: str) -> str:
        candidates = (hint, *(f"{hint}{i}" for i in range(1, self._max_suffix + 1)))
        name = next((c for c in candidates if c not in self._taken), None)
        if name is None:
            raise NameAllocationError(
                f"no free name for hint '{hint}' within {self._max_suffix} suffixes"
            )
        self._taken.add(name)
        logger.debug("Allocated temporary %s (hint=%s)", name, hint)
        return name

    def child(self) -> ScopeNameAllocator:
        """Allocator for a nested scope: sees every name taken so far."""
        return ScopeNameAllocator(self._taken, self._max_suffix)
