"""Addressed messages, observers that react to payload types, and a message queue."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, ClassVar, Deque, Generic, List, Tuple, Type, TypeVar, Union

from .types import Addressee

P = TypeVar("P")


@dataclass(frozen=True)
class Message(Generic[P]):
    """A payload addressed to one or more recipients."""

    addressee: Union[Addressee, int]
    payload: P

    def is_for(self, addressee: Union[Addressee, int]) -> bool:
        """Whether any of the given recipients is addressed."""
        return bool(int(self.addressee) & int(addressee))


class Observer(ABC, Generic[P]):
    """Reacts to messages whose payload is an instance of ``payload_type``."""

    payload_type: ClassVar[Union[Type[Any], Tuple[Type[Any], ...]]] = object

    def on_message(self, message: Message[Any]) -> bool:
        """Process the payload if it has the handled type; report whether it did."""
        if isinstance(message.payload, self.payload_type):
            self.process_message(message.payload)
            return True
        return False

    @abstractmethod
    def process_message(self, payload: P) -> None:
        """Handle a payload of the observed type."""


class MessageBus:
    """A thread-safe first-in first-out queue of messages."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: Deque[Message[Any]] = deque()

    def send(self, message: Message[Any]) -> None:
        with self._lock:
            self._pending.append(message)

    def drain(self) -> List[Message[Any]]:
        """Remove and return every pending message in the order sent."""
        with self._lock:
            messages = list(self._pending)
            self._pending.clear()
        return messages

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)