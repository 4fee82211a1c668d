"""Entry index - which rendered cards describe which content item.

Cards and subjects are nodes of an undirected graph; an edge binds a card
to the subject it currently shows. The neighbors of a subject node are its
sibling entries, all of which receive a resolution for that subject."""

from __future__ import annotations

import itertools
import logging
from collections import OrderedDict
from typing import Any

import networkx as nx

from ..core.models import RequestKey

logger = logging.getLogger(__name__)

ENTRY = "entry"
SUBJECT = "subject"


def _entry_node(key: RequestKey) -> tuple[str, str]:
    return (ENTRY, key)


def _subject_node(subject_id: str) -> tuple[str, str]:
    return (SUBJECT, subject_id)


class EntryIndex:
    """Bipartite card <-> subject index with a cap on tracked cards"""

    def __init__(self, max_entries: int = 5000):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self.graph = nx.Graph()
        self._sequence = itertools.count()
        # Tracked cards, oldest first
        self._order: OrderedDict[RequestKey, None] = OrderedDict()
        self._stats = {"bound": 0, "rebound": 0, "evictions": 0}

    def bind(self, key: RequestKey, subject_id: str) -> None:
        """Bind a card to a subject, replacing any previous binding.

        Cards get reused for other content as the page scrolls, so a card is
        only ever bound to one subject at a time.
        """
        if not key or not subject_id:
            return

        entry = _entry_node(key)
        subject = _subject_node(subject_id)

        if self.graph.has_node(entry):
            if self.graph.has_edge(entry, subject):
                return
            for previous in list(self.graph.neighbors(entry)):
                self.graph.remove_edge(entry, previous)
                self._drop_if_orphan(previous)
            self._stats["rebound"] += 1
        else:
            self._evict_if_full()
            self.graph.add_node(entry, kind=ENTRY, seq=next(self._sequence))
            self._order[key] = None

        if not self.graph.has_node(subject):
            self.graph.add_node(subject, kind=SUBJECT)
        self.graph.add_edge(entry, subject)
        self._stats["bound"] += 1

    def unbind(self, key: RequestKey) -> None:
        """Forget a card entirely"""
        entry = _entry_node(key)
        if not self.graph.has_node(entry):
            return
        neighbors = list(self.graph.neighbors(entry))
        self.graph.remove_node(entry)
        self._order.pop(key, None)
        for subject in neighbors:
            self._drop_if_orphan(subject)

    def subject_of(self, key: RequestKey) -> str | None:
        entry = _entry_node(key)
        if not self.graph.has_node(entry):
            return None
        for _, subject_id in self.graph.neighbors(entry):
            return subject_id
        return None

    def siblings(self, subject_id: str) -> list[RequestKey]:
        """All card keys bound to a subject, in first-observed order"""
        subject = _subject_node(subject_id)
        if not subject_id or not self.graph.has_node(subject):
            return []
        entries = sorted(self.graph.neighbors(subject), key=lambda node: self.graph.nodes[node]["seq"])
        return [key for _, key in entries]

    def entry_count(self) -> int:
        return len(self._order)

    def _drop_if_orphan(self, subject: tuple[str, str]) -> None:
        if self.graph.has_node(subject) and self.graph.degree(subject) == 0:
            self.graph.remove_node(subject)

    def _evict_if_full(self) -> None:
        if len(self._order) < self.max_entries:
            return
        self.unbind(next(iter(self._order)))
        self._stats["evictions"] += 1

    def clear(self) -> None:
        self.graph.clear()
        self._order.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get index statistics"""
        return {
            "entries": self.entry_count(),
            "subjects": self.graph.number_of_nodes() - self.entry_count(),
            "max_entries": self.max_entries,
            **self._stats,
        }
