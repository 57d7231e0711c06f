from collections import OrderedDict
from typing import Any, Optional


class LRUCache:

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._items: "OrderedDict[str, Any]" = OrderedDict()

    def get(self, key: str) -> Optional[Any]:
        if key not in self._items:
            return None
        self._items.move_to_end(key)
        return self._items[key]

    def set(self, key: str, value: Any) -> None:
        if key in self._items:
            self._items.move_to_end(key)
        elif len(self._items) >= self.capacity:
            # oldest entry sits at the front
            self._items.popitem(last=False)
        self._items[key] = value

    def has(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
