"""A flat grid of voxels, their masses and the integrity-check bookkeeping."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from .sketch_netmessages import INTEGRITY_SLICE_SIZE
from .types import ColourByte

Vec3 = Tuple[float, float, float]
Colour4 = Tuple[float, float, float, float]

_MAX_MASS = 255


def _round_half_away(value: float) -> int:
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


@dataclass(eq=False)
class Voxel:
    """One block of the canvas: where it is, how it looks and whether it can be hit."""

    position: Vec3
    scale: Vec3
    colour: Colour4 = (1.0, 1.0, 1.0, 1.0)
    visible: bool = True
    collidable: bool = True
    owner: Any = None


class VoxelCanvas:
    """A grid of ``blocks_wide`` by ``blocks_high`` voxels centred on (x, y).

    Every voxel starts with a mass of one.  ``on_mass_change`` receives +1 or -1
    whenever mass is added or removed, ``on_voxel_emptied`` receives the index
    and voxel when a voxel's mass drops to zero, and ``on_integrity_complete``
    is called once the integrity cache has received its last slice.
    """

    def __init__(
        self,
        x: float,
        y: float,
        blocks_wide: int,
        blocks_high: int,
        block_scale: float,
        on_mass_change: Optional[Callable[[int], None]] = None,
        on_voxel_emptied: Optional[Callable[[int, Voxel], None]] = None,
        on_integrity_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        if blocks_wide <= 0 or blocks_high <= 0:
            raise ValueError("a canvas needs at least one block in each direction")
        if block_scale <= 0:
            raise ValueError("block scale must be positive")
        self.cx = float(x)
        self.cy = float(y)
        self.width = int(blocks_wide)
        self.height = int(blocks_high)
        self.scale = float(block_scale)
        self.half_width = self.width * self.scale / 2.0
        self.half_height = self.height * self.scale / 2.0
        self._inv_scale = 1.0 / self.scale

        self._on_mass_change = on_mass_change or (lambda delta: None)
        self._on_voxel_emptied = on_voxel_emptied or (lambda index, voxel: None)
        self._on_integrity_complete = on_integrity_complete or (lambda: None)
        self._lock = threading.RLock()

        left = self.cx - (self.width / 2.0) * self.scale
        top = self.cy - (self.height / 2.0) * self.scale
        size = (self.scale, self.scale, self.scale)
        self._voxels: List[Voxel] = [
            Voxel((left + col * self.scale, 0.0, top + row * self.scale), size)
            for row in range(self.height)
            for col in range(self.width)
        ]
        self._masses: List[int] = [1] * len(self._voxels)
        self._integrity_cache: List[int] = [0] * len(self._voxels)
        self._saved: List[Tuple[ColourByte, bool]] = []

    def __len__(self) -> int:
        return len(self._voxels)

    @property
    def voxels(self) -> Tuple[Voxel, ...]:
        return tuple(self._voxels)

    @property
    def masses(self) -> Tuple[int, ...]:
        with self._lock:
            return tuple(self._masses)

    @property
    def integrity_cache(self) -> Tuple[int, ...]:
        with self._lock:
            return tuple(self._integrity_cache)

    @property
    def saved_colours(self) -> Tuple[ColourByte, ...]:
        with self._lock:
            return tuple(colour for colour, _ in self._saved)

    def _check_index(self, index: int) -> int:
        if not 0 <= index < len(self._voxels):
            raise IndexError(f"voxel index {index} outside canvas of {len(self._voxels)}")
        return index

    def voxel_at_coordinate(self, x: int, y: int) -> Voxel:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"coordinate ({x}, {y}) outside {self.width}x{self.height} canvas")
        return self._voxels[y * self.width + x]

    def voxel_at_index(self, index: int) -> Voxel:
        return self._voxels[self._check_index(index)]

    def coordinate_of(self, voxel: Voxel) -> Tuple[int, int]:
        """The grid column and row that a voxel's position falls on."""
        dx = voxel.position[0] - self.cx + self.half_width
        dy = voxel.position[2] - self.cy + self.half_height
        return (_round_half_away(dx * self._inv_scale), _round_half_away(dy * self._inv_scale))

    def index_of(self, voxel: Voxel) -> int:
        x, y = self.coordinate_of(voxel)
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(f"voxel at {voxel.position} is not on the canvas")
        return y * self.width + x

    # Mass

    def add_mass(self, index: int) -> int:
        """Add one unit of mass to a voxel and return its new mass."""
        with self._lock:
            self._check_index(index)
            if self._masses[index] >= _MAX_MASS:
                raise ValueError(f"voxel {index} already holds the maximum mass")
            self._masses[index] += 1
            mass = self._masses[index]
        self._on_mass_change(1)
        return mass

    def remove_mass(self, index: int) -> int:
        """Take one unit of mass from a voxel; an emptied voxel is hidden and disabled."""
        with self._lock:
            self._check_index(index)
            if self._masses[index] <= 0:
                raise ValueError(f"voxel {index} has no mass to remove")
            self._masses[index] -= 1
            mass = self._masses[index]
            voxel = self._voxels[index]
            if mass == 0:
                voxel.visible = False
                voxel.collidable = False
        self._on_mass_change(-1)
        if mass == 0:
            self._on_voxel_emptied(index, voxel)
        return mass

    def has_voxel(self, index: int) -> bool:
        with self._lock:
            return self._masses[self._check_index(index)] > 0

    def reset_mass(self) -> None:
        with self._lock:
            self._masses = [1] * len(self._voxels)

    # Colours saved while checking integrity

    def save_colours(self) -> None:
        """Remember every voxel's colour and visibility."""
        with self._lock:
            self._saved = [
                (ColourByte.from_floats(*voxel.colour[:3]), voxel.visible)
                for voxel in self._voxels
            ]

    def reinstate_colours(self) -> None:
        """Give every voxel back the colour and visibility saved earlier."""
        with self._lock:
            if len(self._saved) != len(self._voxels):
                raise RuntimeError("no saved colours to reinstate")
            for voxel, (colour, visible) in zip(self._voxels, self._saved):
                voxel.colour = (*colour.to_floats(), 1.0)
                voxel.visible = visible

    def clear_colours(self) -> None:
        with self._lock:
            self._saved = []

    # Integrity cache

    def clear_integrity_cache(self) -> None:
        with self._lock:
            self._integrity_cache = [0] * len(self._integrity_cache)

    def add_local_mass_to_cache(self) -> None:
        with self._lock:
            self._integrity_cache = [
                cached + mass for cached, mass in zip(self._integrity_cache, self._masses)
            ]

    def add_slice_to_cache(self, start: int, data: Union[bytes, Sequence[int]]) -> bool:
        """Add a peer's masses from ``start`` on; report whether the cache is now complete."""
        with self._lock:
            total = len(self._integrity_cache)
            if start < 0:
                raise IndexError(f"slice start {start} is negative")
            upper = min(start + len(data), total)
            for offset, index in enumerate(range(start, upper)):
                self._integrity_cache[index] += data[offset]
            consumed = max(0, upper - start)
            complete = start + consumed >= total
        if complete:
            self._on_integrity_complete()
        return complete

    def mass_slices(self) -> Iterator[Tuple[int, bytes]]:
        """Yield (start index, masses) in slices that fit one integrity message.

        Slices are yielded until one is shorter than a full slice, so at least
        one is always produced.
        """
        masses = self.masses
        start = 0
        while True:
            chunk = bytes(min(mass, _MAX_MASS) for mass in masses[start:start + INTEGRITY_SLICE_SIZE])
            yield start, chunk
            start += len(chunk)
            if len(chunk) < INTEGRITY_SLICE_SIZE:
                return