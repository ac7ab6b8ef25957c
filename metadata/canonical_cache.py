import threading
from collections import OrderedDict

from config.settings import GOG_CACHE_CAPACITY


class LRUCache:
    """Fixed-capacity key/value store evicting the least recently used key.

    ``get`` hits and ``put`` both move the key to the most recent position.
    One lock guards the whole map.
    """

    def __init__(self, capacity=GOG_CACHE_CAPACITY):
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._lock = threading.Lock()
        self._entries = OrderedDict()

    def get(self, key):
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key, value):
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def keys(self):
        with self._lock:
            return list(self._entries.keys())

    def __contains__(self, key):
        with self._lock:
            return key in self._entries

    def __len__(self):
        with self._lock:
            return len(self._entries)
