"""In-memory stores for per-session builder results and flow state."""

from __future__ import annotations

import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Generic, TypeVar

from .builder import BuilderAction
from .errors import SessionNotFound
from .schemas import BuilderResult, Idea

DEFAULT_MAX_SESSIONS = 10_000


@dataclass
class BuilderSlot:
    """Results for the idea currently selected in one session."""

    idea: Idea
    results: Dict[BuilderAction, BuilderResult] = field(default_factory=dict)


class BuilderResultStore:
    """Keep at most one result per builder action for each session.

    Results belong to the selected idea: storing a result for a different
    idea starts a fresh slot. Ideas are compared by content because their
    ids are reused across batches. The least recently written session is
    evicted once ``max_sessions`` is exceeded.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        self._slots: OrderedDict[str, BuilderSlot] = OrderedDict()
        self._max_sessions = max_sessions

    def upsert_result(
        self,
        session_id: str,
        idea: Idea,
        action: BuilderAction,
        result: BuilderResult,
    ) -> None:
        """Persist *result* for *action*, overwriting only that action."""

        slot = self._slots.get(session_id)
        if slot is None or slot.idea != idea:
            slot = BuilderSlot(idea=idea)
            self._slots[session_id] = slot
        slot.results[action] = result
        self._slots.move_to_end(session_id)
        while len(self._slots) > self._max_sessions:
            self._slots.popitem(last=False)

    def get_session(self, session_id: str) -> BuilderSlot | None:
        """Return a shallow copy of the session's slot."""

        slot = self._slots.get(session_id)
        if slot is None:
            return None
        return BuilderSlot(idea=slot.idea, results=dict(slot.results))

    def discard(self, session_id: str) -> None:
        self._slots.pop(session_id, None)

    def clear(self) -> None:
        self._slots.clear()


StateT = TypeVar("StateT")


@dataclass
class _FlowEntry(Generic[StateT]):
    owner: str
    state: StateT


class FlowSessionStore(Generic[StateT]):
    """Map session ids to the current screen of the application flow.

    Each session belongs to the credential that created it; lookups with any
    other credential behave as if the session did not exist.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        self._entries: OrderedDict[str, _FlowEntry[StateT]] = OrderedDict()
        self._max_sessions = max_sessions

    def _entry(self, session_id: str, owner: str) -> _FlowEntry[StateT]:
        entry = self._entries.get(session_id)
        if entry is None or entry.owner != owner:
            raise SessionNotFound(f"No session found for '{session_id}'.")
        return entry

    def create(self, initial: StateT, owner: str) -> str:
        session_id = uuid.uuid4().hex
        self._entries[session_id] = _FlowEntry(owner=owner, state=initial)
        while len(self._entries) > self._max_sessions:
            self._entries.popitem(last=False)
        return session_id

    def get(self, session_id: str, owner: str) -> StateT:
        return self._entry(session_id, owner).state

    def set(self, session_id: str, owner: str, state: StateT) -> None:
        self._entry(session_id, owner).state = state
        self._entries.move_to_end(session_id)

    def delete(self, session_id: str, owner: str) -> None:
        self._entry(session_id, owner)
        del self._entries[session_id]

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._entries
