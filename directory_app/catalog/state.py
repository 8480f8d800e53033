"""
Catalog state container with pure transitions.

Click counts are held in two phases: `persisted` is the last value read from
the store, `pending` counts clicks made locally that the store may not have
absorbed yet. The count shown to the user is `persisted + pending`.

Merge rule (counts_reconciled): the new persisted value replaces the old one,
and pending shrinks by however much the persisted value grew, never below
zero. A persisted value lower than before is taken as-is and pending is left
alone.
"""

from dataclasses import dataclass, field, replace
from typing import AbstractSet, Dict, FrozenSet, Iterable, Mapping


@dataclass(frozen=True)
class ClickCounter:
    persisted: int = 0
    pending: int = 0

    @property
    def displayed(self) -> int:
        return self.persisted + self.pending


@dataclass(frozen=True)
class CatalogState:
    counters: Mapping[str, ClickCounter] = field(default_factory=dict)
    favorites: FrozenSet[str] = frozenset()

    @classmethod
    def from_records(cls, tools: Iterable, favorite_ids: AbstractSet[str] = frozenset()) -> "CatalogState":
        return cls(
            counters={tool.id: ClickCounter(persisted=tool.clicks_count or 0) for tool in tools},
            favorites=frozenset(favorite_ids),
        )

    def displayed_counts(self) -> Dict[str, int]:
        return {tool_id: counter.displayed for tool_id, counter in self.counters.items()}

    def displayed(self, tool_id: str) -> int:
        return self.counters.get(tool_id, ClickCounter()).displayed


def tool_clicked(state: CatalogState, tool_id: str) -> CatalogState:
    """Optimistic phase: count the click before the store confirms it."""
    counter = state.counters.get(tool_id, ClickCounter())
    counters = dict(state.counters)
    counters[tool_id] = replace(counter, pending=counter.pending + 1)
    return replace(state, counters=counters)


def counts_reconciled(state: CatalogState, persisted: Mapping[str, int]) -> CatalogState:
    """Reconciled phase: merge freshly read store counters into the state."""
    counters = dict(state.counters)
    for tool_id, value in persisted.items():
        old = counters.get(tool_id, ClickCounter())
        absorbed = max(0, value - old.persisted)
        counters[tool_id] = ClickCounter(
            persisted=value,
            pending=max(0, old.pending - absorbed),
        )
    return replace(state, counters=counters)


def favorite_toggled(state: CatalogState, tool_id: str, is_favorite: bool) -> CatalogState:
    if is_favorite:
        favorites = state.favorites | {tool_id}
    else:
        favorites = state.favorites - {tool_id}
    return replace(state, favorites=frozenset(favorites))
