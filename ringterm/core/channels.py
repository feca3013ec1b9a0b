from __future__ import annotations

from typing import Callable, Iterator, List, Optional

from .models import Channel


class ChannelList:
    """Ordered channels plus a single selection.

    Position 0 holds the control channel. Channels are referenced by id from
    outside; indices only make sense between two calls on this object.
    The selection is None only when the list is empty.
    """

    def __init__(self, items: Optional[List[Channel]] = None):
        self._items: List[Channel] = list(items or [])
        self._selected: Optional[int] = 0 if self._items else None

    # ----- Read access -----
    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Channel]:
        return iter(list(self._items))

    def at(self, index: int) -> Channel:
        return self._items[index]

    def ids(self) -> List[str]:
        return [c.id for c in self._items]

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    def selected_channel(self) -> Optional[Channel]:
        if self._selected is None:
            return None
        return self._items[self._selected]

    def index_of(self, channel_id: str) -> Optional[int]:
        for i, ch in enumerate(self._items):
            if ch.id == channel_id:
                return i
        return None

    def get(self, channel_id: str) -> Optional[Channel]:
        idx = self.index_of(channel_id)
        return None if idx is None else self._items[idx]

    def control(self) -> Optional[Channel]:
        for ch in self._items:
            if ch.is_control():
                return ch
        return None

    # ----- Selection -----
    def select(self, index: int) -> None:
        if not self._items:
            self._selected = None
            return
        self._selected = min(max(index, 0), len(self._items) - 1)

    def next(self) -> None:
        if not self._items:
            return
        cur = self._selected if self._selected is not None else -1
        self._selected = (cur + 1) % len(self._items)

    def previous(self) -> None:
        if not self._items:
            return
        cur = self._selected if self._selected is not None else 0
        self._selected = (cur - 1) % len(self._items)

    # ----- Mutation -----
    def bubble_up(self, index: int) -> None:
        """Move the channel at `index` to position 1, keeping position 0 in place.

        Channels between the anchor and `index` shift down by one. The
        selection keeps pointing at the same channel.
        """
        if index < 0 or index >= len(self._items):
            return
        if index > 1:
            self._items.insert(1, self._items.pop(index))
        sel = self._selected
        if sel is None:
            return
        if sel == 0 and index == 0:
            self._selected = 0
        elif sel == index:
            self._selected = 1
        elif 0 < sel < index:
            self._selected = sel + 1

    def insert_and_bubble(self, channel: Channel) -> int:
        """Append `channel`, bubble it up and return its new index."""
        self._items.append(channel)
        if self._selected is None:
            self._selected = 0
        idx = len(self._items) - 1
        self.bubble_up(idx)
        return min(idx, 1)

    def remove_by_id(self, channel_id: str) -> bool:
        """Drop every channel with `channel_id`. The control channel is never dropped."""
        removed = False
        i = 0
        while i < len(self._items):
            ch = self._items[i]
            if ch.id != channel_id or ch.is_control():
                i += 1
                continue
            del self._items[i]
            removed = True
            sel = self._selected
            if sel is not None:
                if sel == i:
                    sel = 0
                elif sel > i:
                    sel -= 1
            self._selected = sel
        if not self._items:
            self._selected = None
        elif self._selected is not None and self._selected >= len(self._items):
            self._selected = len(self._items) - 1
        return removed

    def retain(self, keep: Callable[[Channel], bool]) -> None:
        for ch in list(self._items):
            if not keep(ch) and not ch.is_control():
                self.remove_by_id(ch.id)

    def replace(self, items: List[Channel]) -> None:
        self._items = list(items)
        self._selected = 0 if self._items else None
