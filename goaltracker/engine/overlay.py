"""
Edit Overlay

Two-layer editable values: the last value fetched from the server and an
optional pending (unsaved) edit. Readers always see ``pending ?? server``.
Refreshing server values never drops pending edits; committing clears them
only after the save succeeded.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, Iterator, Mapping, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class FieldOverlay(Generic[V]):
    """One editable value"""
    server_value: Optional[V] = None
    pending_edit: Optional[V] = None

    @property
    def value(self) -> Optional[V]:
        return self.pending_edit if self.pending_edit is not None else self.server_value

    @property
    def is_dirty(self) -> bool:
        return self.pending_edit is not None

    def edit(self, value: V) -> None:
        self.pending_edit = value

    def discard(self) -> None:
        self.pending_edit = None

    def commit(self) -> None:
        """Promote the pending edit to the server value"""
        if self.pending_edit is not None:
            self.server_value = self.pending_edit
            self.pending_edit = None


class EditBuffer(Generic[K, V]):
    """
    Keyed collection of field overlays.

    Example:
        buffer = EditBuffer({9: 10.0, 10: 15.0})
        buffer.edit(10, 20.0)
        buffer.merged()            # {9: 10.0, 10: 20.0}
        await buffer.commit(save)  # clears edits once save() returns
    """

    def __init__(self, server_values: Optional[Mapping[K, V]] = None):
        self._fields: Dict[K, FieldOverlay[V]] = {}
        if server_values:
            self.refresh(server_values)

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[K]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def refresh(self, server_values: Mapping[K, V]) -> None:
        """Replace the server layer; pending edits survive"""
        for key, overlay in self._fields.items():
            if key not in server_values:
                overlay.server_value = None
        for key, value in server_values.items():
            self._fields.setdefault(key, FieldOverlay()).server_value = value

    def edit(self, key: K, value: V) -> None:
        self._fields.setdefault(key, FieldOverlay()).edit(value)

    def discard(self, key: Optional[K] = None) -> None:
        """Drop one pending edit, or all of them"""
        targets = [self._fields[key]] if key is not None and key in self._fields else (
            self._fields.values() if key is None else []
        )
        for overlay in targets:
            overlay.discard()

    def value(self, key: K, default: Optional[V] = None) -> Optional[V]:
        overlay = self._fields.get(key)
        if overlay is None or overlay.value is None:
            return default
        return overlay.value

    def merged(self) -> Dict[K, V]:
        return {
            key: overlay.value
            for key, overlay in self._fields.items()
            if overlay.value is not None
        }

    def pending(self) -> Dict[K, V]:
        return {
            key: overlay.pending_edit
            for key, overlay in self._fields.items()
            if overlay.is_dirty
        }

    @property
    def has_pending(self) -> bool:
        return any(overlay.is_dirty for overlay in self._fields.values())

    async def commit(self, save: Callable[[Dict[K, V]], Awaitable[Any]]) -> Dict[K, V]:
        """
        Persist the merged values through ``save``.

        If ``save`` raises, the exception propagates and every pending edit
        is kept so the caller can retry without re-entering data.
        """
        payload = self.merged()
        await save(payload)
        for overlay in self._fields.values():
            overlay.commit()
        return payload
