"""Results reported by the sensor: blocks and arrows, and the set of them from one request."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from itertools import islice
from typing import Iterable, Iterator, Optional, Tuple

from .protocol import Command, Frame

_FIVE_INT16 = struct.Struct("<5h")


@dataclass(frozen=True)
class Result:
    """One five-field record: a block, an arrow or the info header of a reply."""

    command: int
    first: int = 0
    second: int = 0
    third: int = 0
    fourth: int = 0
    fifth: int = 0

    @classmethod
    def from_frame(cls, frame: Frame) -> "Result":
        """Read five little-endian int16 values from a frame; missing bytes read as zero."""
        content = frame.content[: _FIVE_INT16.size].ljust(_FIVE_INT16.size, b"\x00")
        return cls(frame.command, *_FIVE_INT16.unpack(content))

    @property
    def x_center(self) -> int:
        return self.first

    @property
    def y_center(self) -> int:
        return self.second

    @property
    def width(self) -> int:
        return self.third

    @property
    def height(self) -> int:
        return self.fourth

    @property
    def x_origin(self) -> int:
        return self.first

    @property
    def y_origin(self) -> int:
        return self.second

    @property
    def x_target(self) -> int:
        return self.third

    @property
    def y_target(self) -> int:
        return self.fourth

    @property
    def id(self) -> int:
        return self.fifth

    @property
    def is_block(self) -> bool:
        return self.command == Command.RETURN_BLOCK

    @property
    def is_arrow(self) -> bool:
        return self.command == Command.RETURN_ARROW

    @property
    def is_learned(self) -> bool:
        """True when the result carries a learned (non-zero) ID."""
        return self.fifth != 0


MISSING_RESULT = Result(command=0xFF, first=-1, second=-1, third=-1, fourth=-1, fifth=-1)
"""Returned by lookups that find nothing: every field is -1."""


def _nth(results: Iterable[Result], index: int) -> Result:
    if index < 0:
        return MISSING_RESULT
    return next(islice(results, index, None), MISSING_RESULT)


@dataclass(frozen=True)
class ResultSet:
    """Results of one request, with the number of learned IDs and the frame number."""

    results: Tuple[Result, ...] = ()
    learned_ids: int = 0
    frame_number: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[Result]:
        return iter(self.results)

    def _with_id(self, id: Optional[int]) -> Iterator[Result]:
        return (r for r in self.results if id is None or r.id == id)

    def _blocks(self, id: Optional[int] = None) -> Iterator[Result]:
        return (r for r in self._with_id(id) if r.is_block)

    def _arrows(self, id: Optional[int] = None) -> Iterator[Result]:
        return (r for r in self._with_id(id) if r.is_arrow)

    def count(self, id: Optional[int] = None) -> int:
        """Number of results, or of results with the given ID."""
        return sum(1 for _ in self._with_id(id))

    def count_blocks(self, id: Optional[int] = None) -> int:
        return sum(1 for _ in self._blocks(id))

    def count_arrows(self, id: Optional[int] = None) -> int:
        return sum(1 for _ in self._arrows(id))

    def count_learned(self) -> int:
        return sum(1 for r in self.results if r.is_learned)

    def count_blocks_learned(self) -> int:
        return sum(1 for r in self._blocks() if r.is_learned)

    def count_arrows_learned(self) -> int:
        return sum(1 for r in self._arrows() if r.is_learned)

    def get(self, index: int, id: Optional[int] = None) -> Result:
        """The index-th result, or the index-th with the given ID; MISSING_RESULT if absent."""
        if id is None:
            if 0 <= index < len(self.results):
                return self.results[index]
            return MISSING_RESULT
        return _nth(self._with_id(id), index)

    def get_block(self, index: int, id: Optional[int] = None) -> Result:
        return _nth(self._blocks(id), index)

    def get_arrow(self, index: int, id: Optional[int] = None) -> Result:
        return _nth(self._arrows(id), index)

    def get_learned(self, index: int) -> Result:
        return _nth((r for r in self.results if r.is_learned), index)

    def get_block_learned(self, index: int) -> Result:
        return _nth((r for r in self._blocks() if r.is_learned), index)

    def get_arrow_learned(self, index: int) -> Result:
        return _nth((r for r in self._arrows() if r.is_learned), index)