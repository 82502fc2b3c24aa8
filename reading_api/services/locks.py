"""Per-story serialization of rating aggregate recomputation."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class StoryLockRegistry:
    """Hands out one lock per story id.

    Recomputing a story's aggregate reads every rating and then writes the
    story row; holding the story's lock across both steps keeps two
    concurrent submissions from writing back a stale mean.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def lock_for(self, story_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(story_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[story_id] = lock
            return lock

    @contextmanager
    def hold(self, story_id: int) -> Iterator[None]:
        lock = self.lock_for(story_id)
        with lock:
            yield


story_locks = StoryLockRegistry()
