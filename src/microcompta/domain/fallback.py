"""Ordered provider chains for settings and tax brackets."""

import logging
from typing import Callable, Generic, Optional, Sequence, Sized, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Provider = Callable[[], Optional[T]]


def _is_empty(value) -> bool:
    if value is None:
        return True
    return isinstance(value, Sized) and len(value) == 0


class FallbackChain(Generic[T]):
    """Try named providers in order and return the first non-empty result.

    A provider returning None or an empty collection passes to the next one.
    """

    def __init__(self, providers: Sequence[tuple[str, Provider]]):
        self.providers = list(providers)

    def resolve(self) -> Optional[tuple[str, T]]:
        """Return ``(source_name, value)`` or None when every provider is empty."""
        for name, provider in self.providers:
            value = provider()
            if _is_empty(value):
                continue
            logger.debug("Resolved value from provider '%s'", name)
            return name, value
        return None
