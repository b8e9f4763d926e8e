"""Core enumerations, addressing flags and payload records."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Any, Tuple

ANYONE = 1
EVERYONE = 2

Connection = Tuple[int, int]
NO_CONNECTION: Connection = (0, 0)


class ComponentType(enum.IntFlag):
    """Kinds of component an entity can hold."""

    TRANSFORM = 1
    RENDER = 2
    NETWORK = 4
    COLLISION = 8
    CAMERA = 16
    LIGHT = 32
    CANVAS = 64


class ColliderType(enum.Enum):
    """Whether a collider moves or stays put."""

    KINEMATIC = enum.auto()
    STATIC = enum.auto()


class Addressee(enum.IntFlag):
    """Recipients of a message; values can be combined with ``|``.

    The low byte is reserved for the engine, higher bits are app-defined.
    """

    RENDER_SYSTEM = 1
    COLLISION_SYSTEM = 2
    NETWORK_SYSTEM = 4
    ENTITY = 8
    ALL = 16
    SCENE = 32
    ENGINE_RESERVED_4 = 64
    ENGINE_RESERVED_5 = 128
    APP_DEFINED_1 = 256
    APP_DEFINED_2 = 512
    APP_DEFINED_3 = 1024
    APP_DEFINED_4 = 2048


class KeyCode(enum.IntEnum):
    """Virtual key codes understood by the input manager."""

    F1 = 0x70
    F2 = 0x71
    F3 = 0x72
    F4 = 0x73
    F5 = 0x74
    F6 = 0x75
    F7 = 0x76
    F8 = 0x77
    F9 = 0x78
    F10 = 0x79
    F11 = 0x7A
    F12 = 0x7B

    A = 0x41
    B = 0x42
    C = 0x43
    D = 0x44
    E = 0x45
    F = 0x46
    G = 0x47
    H = 0x48
    I = 0x49
    J = 0x4A
    K = 0x4B
    L = 0x4C
    M = 0x4D
    N = 0x4E
    O = 0x4F
    P = 0x50
    Q = 0x51
    R = 0x52
    S = 0x53
    T = 0x54
    U = 0x55
    V = 0x56
    W = 0x57
    X = 0x58
    Y = 0x59
    Z = 0x5A

    ZERO = 0x30
    ONE = 0x31
    TWO = 0x32
    THREE = 0x33
    FOUR = 0x34
    FIVE = 0x35
    SIX = 0x36
    SEVEN = 0x37
    EIGHT = 0x38
    NINE = 0x39

    LEFT = 0x25
    UP = 0x26
    RIGHT = 0x27
    DOWN = 0x28

    TAB = 0x09
    ENTER = 0x0D
    SHIFT = 0x10
    CONTROL = 0x11
    ALT = 0x12
    ESCAPE = 0x1B
    SPACE = 0x20
    BACKSPACE = 0x08
    DELETE = 0x2E


def _to_byte(channel: float) -> int:
    # Round half away from zero, then keep within a byte.
    return max(0, min(255, int(math.floor(channel * 255 + 0.5))))


@dataclass(frozen=True)
class ColourByte:
    """An RGB colour stored as three bytes."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"colour channel out of range: {channel}")

    @classmethod
    def from_floats(cls, r: float, g: float, b: float) -> "ColourByte":
        """Build from channels in the range 0..1."""
        return cls(_to_byte(r), _to_byte(g), _to_byte(b))

    def to_floats(self) -> Tuple[float, float, float]:
        """Return the channels scaled back to 0..1."""
        return (self.r / 255.0, self.g / 255.0, self.b / 255.0)


class SystemInstruction(enum.IntEnum):
    """What a system message asks a system to change."""

    UPDATE_FREQUENCY = 0
    UPDATE_CORE = 1


@dataclass(frozen=True)
class SystemPayload:
    instruction: int
    value: int


@dataclass(frozen=True)
class PullEntityPayload:
    dummy: int = 0


@dataclass(frozen=True)
class ConnectionDiedPayload:
    connection: Connection


@dataclass(frozen=True)
class UpdateEntityPayload:
    entity: Any


@dataclass(frozen=True)
class ChangeRenderComponentColourPayload:
    r: float
    g: float
    b: float


@dataclass(frozen=True)
class ChangeRenderComponentColourAndEnabledPayload:
    r: float
    g: float
    b: float
    enabled: bool