"""Core domain models for collaborator identity resolution.

These models represent the engine's data and are independent of the
page extraction layer that produces them."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

RequestKey = str


class RequestState(Enum):
    """Lifecycle of a pending request"""

    AWAITING = "awaiting"
    RESOLVED = "resolved"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Collaborator:
    """A person credited on a content item.

    Fields hold canonical values: ``handle`` is a normalized ``@handle``,
    ``id`` is an opaque channel ID. Instances are immutable so they can be
    shared between components without defensive copies.
    """

    name: str | None = None
    handle: str | None = None
    id: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.handle or self.id)

    @classmethod
    def from_raw(
        cls,
        name: str | None = None,
        handle: str | None = None,
        id: str | None = None,
    ) -> Collaborator | None:
        """Build a canonical collaborator from raw extracted strings.

        The handle slot is classified first: a channel URL or bare opaque ID
        fills the id slot, and text without an ``@`` marker is discarded.

        Returns None when nothing usable remains after normalization.
        """
        from ..shared.identity import canonicalize_channel_input, normalize_opaque_id

        clean_name = name.strip() if isinstance(name, str) else ""
        clean_id = normalize_opaque_id(id) if id else None
        clean_handle = None

        if handle:
            channel = canonicalize_channel_input(handle)
            if channel.kind == "handle":
                clean_handle = channel.value
            elif channel.kind == "ucid" and not clean_id:
                clean_id = normalize_opaque_id(channel.value)

        collaborator = cls(
            name=clean_name or None,
            handle=clean_handle,
            id=clean_id or None,
        )
        return None if collaborator.is_empty else collaborator


CandidateList = tuple[Collaborator, ...]


def as_candidate_list(collaborators: Iterable[Collaborator | None] | None) -> CandidateList:
    """Capture an immutable candidate list, dropping missing and empty entries."""
    if not collaborators:
        return ()
    return tuple(c for c in collaborators if isinstance(c, Collaborator) and not c.is_empty)


@dataclass
class PendingRequest:
    """One rendered card awaiting corroborating detail.

    Owned by the registry; other components read it through registry lookups.
    """

    key: RequestKey
    subject_id: str
    partial_candidates: CandidateList
    expected_count: int
    created_at: float
    expires_at: float
    state: RequestState = RequestState.AWAITING
    refresh_count: int = 0

    @property
    def subject_key(self) -> str:
        """Key used for the resolved cache when no subject id is known yet."""
        return self.subject_id or self.key

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class TriggerRecord:
    """Most recent user interaction that asked for disambiguation detail"""

    key: RequestKey
    timestamp: float


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of a successful match, delivered once to subscribers"""

    subject_id: str
    collaborators: CandidateList
    expected_count: int
    quality_score: int
    entry_keys: tuple[RequestKey, ...] = field(default_factory=tuple)

    @property
    def handles(self) -> list[str]:
        return [c.handle for c in self.collaborators if c.handle]

    @property
    def channel_ids(self) -> list[str]:
        return [c.id for c in self.collaborators if c.id]
