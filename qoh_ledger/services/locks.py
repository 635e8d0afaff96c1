from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import ExitStack, contextmanager


class GameLocks:
    """In-process mutual exclusion per game id and per organization.

    Every ledger write resums the whole game, so two writers on one game must
    never interleave. Writers on different games do not block each other.
    Creating a game and handing carryover to a successor hold the
    organization lock first, then the game locks.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}

    def _lock_for(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *game_ids: int) -> Iterator[None]:
        # fixed acquisition order so two multi-game holders cannot deadlock
        with ExitStack() as stack:
            for game_id in sorted(set(game_ids)):
                stack.enter_context(self._lock_for(("game", game_id)))
            yield

    @contextmanager
    def hold_organization(self, organization_id: str) -> Iterator[None]:
        with self._lock_for(("organization", organization_id)):
            yield


game_locks = GameLocks()
