"""Keyboard and mouse state as seen by the game each frame."""

from __future__ import annotations

import threading
from typing import FrozenSet, Iterable, Tuple, Union

from .types import KeyCode

KEY_COUNT = 256

Key = Union[KeyCode, int]


def _key_index(key: Key) -> int:
    index = int(key)
    if not 0 <= index < KEY_COUNT:
        raise ValueError(f"key code {index} outside 0..{KEY_COUNT - 1}")
    return index


class InputManager:
    """Holds the keys down this frame and last frame, plus mouse state."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._keys: FrozenSet[int] = frozenset()
        self._previous: FrozenSet[int] = frozenset()
        self.left_clicked = False
        self.right_clicked = False
        self.mouse_position: Tuple[float, float] = (0.0, 0.0)
        self.active = False

    def update(
        self,
        keys_down: Iterable[Key],
        left_click: bool = False,
        right_click: bool = False,
        mouse_position: Tuple[float, float] = (0.0, 0.0),
    ) -> None:
        """Record a new frame of input; the current keys become last frame's."""
        new_keys = frozenset(_key_index(key) for key in keys_down)
        with self._lock:
            self._previous = self._keys
            self._keys = new_keys
        self.left_clicked = bool(left_click)
        self.right_clicked = bool(right_click)
        self.mouse_position = (float(mouse_position[0]), float(mouse_position[1]))

    def key_down(self, key: Key) -> bool:
        index = _key_index(key)
        with self._lock:
            return index in self._keys

    def key_up(self, key: Key) -> bool:
        index = _key_index(key)
        with self._lock:
            return index not in self._keys

    def key_pressed(self, key: Key) -> bool:
        """Whether the key went down this frame after being up the last."""
        index = _key_index(key)
        with self._lock:
            return index in self._keys and index not in self._previous