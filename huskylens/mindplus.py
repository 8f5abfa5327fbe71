"""Block-style convenience layer: plain coordinate records and lookups by result type."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional, TypeVar, Union

from .client import CommunicationError, HuskyLens
from .results import Result

SCREEN_WIDTH = 320
SCREEN_HEIGHT = 240
DEFAULT_CONNECT_INTERVAL = 0.1

_T = TypeVar("_T")


class ResultType(IntEnum):
    """Kind of result a lookup refers to."""

    BLOCK = 0
    ARROW = 1


@dataclass(frozen=True)
class BlockInfo:
    """Position and size of a block."""

    x_center: int
    y_center: int
    width: int
    height: int

    @classmethod
    def from_result(cls, result: Result) -> "BlockInfo":
        return cls(result.x_center, result.y_center, result.width, result.height)


@dataclass(frozen=True)
class ArrowInfo:
    """End points of an arrow."""

    x_origin: int
    y_origin: int
    x_target: int
    y_target: int

    @classmethod
    def from_result(cls, result: Result) -> "ArrowInfo":
        return cls(result.x_origin, result.y_origin, result.x_target, result.y_target)


@dataclass(frozen=True)
class BlockDirectInfo:
    """Position and size of a block together with its ID."""

    x_center: int
    y_center: int
    width: int
    height: int
    id: int

    @classmethod
    def from_result(cls, result: Result) -> "BlockDirectInfo":
        return cls(
            result.x_center, result.y_center, result.width, result.height, result.id
        )


@dataclass(frozen=True)
class ArrowDirectInfo:
    """End points of an arrow together with its ID."""

    x_origin: int
    y_origin: int
    x_target: int
    y_target: int
    id: int

    @classmethod
    def from_result(cls, result: Result) -> "ArrowDirectInfo":
        return cls(
            result.x_origin, result.y_origin, result.x_target, result.y_target, result.id
        )


def _half(value: int) -> int:
    """Halve an integer, rounding toward zero."""
    return value // 2 if value >= 0 else -((-value) // 2)


def _distance_to_centre(x: int, y: int) -> int:
    return (x - SCREEN_WIDTH // 2) ** 2 + (y - SCREEN_HEIGHT // 2) ** 2


class MindPlusLens(HuskyLens):
    """HuskyLens client with lookups keyed by result type and 1-based indices."""

    def _by_kind(
        self,
        kind: Union[ResultType, int],
        block: Callable[[], _T],
        arrow: Callable[[], _T],
    ) -> _T:
        kind = ResultType(kind)
        return block() if kind is ResultType.BLOCK else arrow()

    def connect_until_success(self, interval: float = DEFAULT_CONNECT_INTERVAL) -> None:
        """Knock repeatedly until the sensor answers, pausing ``interval`` seconds between rounds."""
        while True:
            try:
                self.knock()
                return
            except CommunicationError:
                time.sleep(interval)

    def is_appear(self, id: int, kind: Union[ResultType, int]) -> bool:
        """Whether a result of ``kind`` with the given ID is in the latest results."""
        return self._by_kind(
            kind,
            lambda: self.results.count_blocks(id) > 0,
            lambda: self.results.count_arrows(id) > 0,
        )

    def is_appear_direct(self, kind: Union[ResultType, int]) -> bool:
        """Whether any result of ``kind`` is in the latest results."""
        return self._by_kind(
            kind,
            lambda: self.results.count_blocks() > 0,
            lambda: self.results.count_arrows() > 0,
        )

    def read_block_parameter(self, id: int, index: int = 1) -> BlockInfo:
        """The ``index``-th (1-based) block with the given ID."""
        return BlockInfo.from_result(self.results.get_block(index - 1, id))

    def read_arrow_parameter(self, id: int, index: int = 1) -> ArrowInfo:
        """The ``index``-th (1-based) arrow with the given ID."""
        return ArrowInfo.from_result(self.results.get_arrow(index - 1, id))

    def read_block_center_parameter_direct(self) -> BlockDirectInfo:
        """The block nearest the screen centre; all fields -1 if there is none."""
        blocks = [r for r in self.results if r.is_block]
        nearest = min(
            range(len(blocks)),
            key=lambda i: _distance_to_centre(blocks[i].x_center, blocks[i].y_center),
            default=-1,
        )
        return BlockDirectInfo.from_result(self.results.get_block(nearest))

    def read_arrow_center_parameter_direct(self) -> ArrowDirectInfo:
        """The arrow whose midpoint is nearest the screen centre; all fields -1 if there is none."""
        arrows = [r for r in self.results if r.is_arrow]

        def distance(i: int) -> int:
            arrow = arrows[i]
            return _distance_to_centre(
                _half(arrow.x_origin + arrow.x_target),
                _half(arrow.y_origin + arrow.y_target),
            )

        nearest = min(range(len(arrows)), key=distance, default=-1)
        return ArrowDirectInfo.from_result(self.results.get_arrow(nearest))

    def read_learned_id_count(self) -> int:
        return self.count_learned_ids()

    def read_count_learned(self, kind: Union[ResultType, int]) -> int:
        """Number of learned results of ``kind``."""
        return self._by_kind(
            kind,
            self.results.count_blocks_learned,
            self.results.count_arrows_learned,
        )

    def read_id_learned(self, index: int, kind: Union[ResultType, int]) -> int:
        """ID of the ``index``-th (0-based) learned result of ``kind``; -1 if absent."""
        return self._by_kind(
            kind,
            lambda: self.results.get_block_learned(index).id,
            lambda: self.results.get_arrow_learned(index).id,
        )

    def read_count(self, kind: Union[ResultType, int], id: Optional[int] = None) -> int:
        """Number of results of ``kind``, optionally only those with the given ID."""
        return self._by_kind(
            kind,
            lambda: self.results.count_blocks(id),
            lambda: self.results.count_arrows(id),
        )

    def read_block_parameter_direct(self, index: int) -> BlockDirectInfo:
        """The ``index``-th (1-based) block of any ID."""
        return BlockDirectInfo.from_result(self.results.get_block(index - 1))

    def read_arrow_parameter_direct(self, index: int) -> ArrowDirectInfo:
        """The ``index``-th (1-based) arrow of any ID."""
        return ArrowDirectInfo.from_result(self.results.get_arrow(index - 1))