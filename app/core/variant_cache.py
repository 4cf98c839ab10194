from collections import OrderedDict
from typing import Optional


class VariantIdCache:
    """
    Maps a cart line (product id + chosen options) to a Printful sync variant id.

    Least-recently-used entries are evicted once `max_entries` is reached;
    otherwise entries live until `clear()` or process restart.
    """

    def __init__(self, max_entries: int = 1024):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, int]" = OrderedDict()

    @staticmethod
    def make_key(product_id: str, color: Optional[str], size: Optional[str]) -> str:
        return f"{product_id}:{(color or '').lower()}:{(size or '').lower()}"

    def get(self, key: str) -> Optional[int]:
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: str, variant_id: int) -> None:
        self._entries[key] = variant_id
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
