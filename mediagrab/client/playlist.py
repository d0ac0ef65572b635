from typing import Any, Dict, Iterable, List, Mapping


class PlaylistSelection:
    """
    Per-entry selection state for a playlist preview.
    Entries start unselected; order always follows the playlist.
    """

    def __init__(self, preview: Mapping[str, Any]):
        self.title = preview.get("title") or "Playlist"
        self.items: List[Dict[str, Any]] = [dict(item) for item in preview.get("items") or []]
        self._selected = {item["id"] for item in self.items if item.get("selected")}

    def __len__(self) -> int:
        return len(self.items)

    def toggle(self, item_id: str) -> bool:
        """Flip one entry and return its new state"""
        if item_id in self._selected:
            self._selected.discard(item_id)
            return False
        if any(item["id"] == item_id for item in self.items):
            self._selected.add(item_id)
            return True
        raise KeyError(item_id)

    def select_all(self) -> None:
        self._selected = {item["id"] for item in self.items}

    def deselect_all(self) -> None:
        self._selected.clear()

    def select_positions(self, positions: Iterable[int]) -> None:
        """Select entries by 1-based position"""
        for position in positions:
            if not 1 <= position <= len(self.items):
                raise IndexError(f"No playlist entry #{position}")
            self._selected.add(self.items[position - 1]["id"])

    @property
    def selected_items(self) -> List[Dict[str, Any]]:
        return [item for item in self.items if item["id"] in self._selected]

    @property
    def selected_urls(self) -> List[str]:
        return [item["url"] for item in self.selected_items]


def parse_positions(value: str) -> List[int]:
    """'1,3,5-7' -> [1, 3, 5, 6, 7]"""
    positions: List[int] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-", 1)
            positions.extend(range(int(start), int(end) + 1))
        else:
            positions.append(int(part))
    return positions
