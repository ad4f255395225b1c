# backend/portfolio/services/rate.py
from __future__ import annotations
import time, threading
from collections import OrderedDict
from typing import Callable, Generic, Optional, TypeVar

V = TypeVar("V")

UPLOAD_COOLDOWN_SEC = 3.0

# ---- Upload cooldown (single last-timestamp, thread-safe) ----
class UploadCooldown:
    def __init__(self, window_sec: float = UPLOAD_COOLDOWN_SEC, clock: Callable[[], float] = time.monotonic):
        self.window = max(0.0, window_sec)
        self.clock = clock
        self._last: Optional[float] = None
        self.mu = threading.Lock()

    def try_acquire(self) -> bool:
        """True and stamp the attempt if outside the window; False otherwise."""
        with self.mu:
            now = self.clock()
            if self._last is not None and (now - self._last) < self.window:
                return False
            self._last = now
            return True

    def remaining(self) -> float:
        with self.mu:
            if self._last is None:
                return 0.0
            return max(0.0, self.window - (self.clock() - self._last))

# ---- Bounded LRU memo (in-memory, per process) ----
class ResponseCache(Generic[V]):
    def __init__(self, max_items: int = 32):
        self.max = max(1, max_items)
        self.mu = threading.Lock()
        self.store: "OrderedDict[str, V]" = OrderedDict()

    @staticmethod
    def key_for(file_name: str, size: int) -> str:
        return f"{file_name}_{size}"

    def get(self, key: str) -> Optional[V]:
        with self.mu:
            if key not in self.store:
                return None
            self.store.move_to_end(key)
            return self.store[key]

    def set(self, key: str, value: V) -> None:
        with self.mu:
            self.store[key] = value
            self.store.move_to_end(key)
            # evict least recently used
            while len(self.store) > self.max:
                self.store.popitem(last=False)

    def __contains__(self, key: str) -> bool:
        with self.mu:
            return key in self.store

    def __len__(self) -> int:
        with self.mu:
            return len(self.store)
