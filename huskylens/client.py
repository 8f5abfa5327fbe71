"""Client for the sensor over any byte transport (serial port or I2C bus wrapper).

A transport is any object with ``write(data: bytes)`` and ``read(size: int) -> bytes``,
where ``read`` returns at most ``size`` bytes that are available, possibly none.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Deque, Optional, Protocol, Union

from .protocol import (
    FIRMWARE_VERSION,
    Algorithm,
    Command,
    Frame,
    FrameDecoder,
    encode_frame,
    pack_custom_name,
    pack_custom_text,
    pack_firmware_version,
    pack_int16s,
)
from .results import Result, ResultSet

DEFAULT_TIMEOUT = 0.1


class _Transport(Protocol):
    def write(self, data: bytes) -> object: ...

    def read(self, size: int) -> bytes: ...


class CommunicationError(Exception):
    """The sensor did not answer as expected within the timeout."""


class HuskyLens:
    """Sends requests to the sensor and keeps the results of the latest one."""

    KNOCK_ATTEMPTS = 5
    READ_CHUNK = 16

    def __init__(self, transport: _Transport, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.transport = transport
        self.timeout = timeout
        self._decoder = FrameDecoder()
        self._frames: Deque[Frame] = deque()
        self._results = ResultSet()
        self._current_index = 0

    @property
    def results(self) -> ResultSet:
        """Results of the latest successful request."""
        return self._results

    def _send(self, command: int, payload: bytes = b"") -> None:
        self.transport.write(encode_frame(command, payload))

    def _wait(self, *commands: int) -> Optional[Frame]:
        """Next frame with one of ``commands`` (any frame if none given), or None on timeout."""
        deadline = time.monotonic() + self.timeout
        while True:
            while self._frames:
                frame = self._frames.popleft()
                if not commands or frame.command in commands:
                    return frame
            if time.monotonic() >= deadline:
                return None
            self._frames.extend(self._decoder.decode(self.transport.read(self.READ_CHUNK)))

    def _expect(self, command: Command) -> Frame:
        frame = self._wait(command)
        if frame is None:
            raise CommunicationError(f"no {command.name} reply within {self.timeout}s")
        return frame

    def _expect_ok(self) -> None:
        self._expect(Command.RETURN_OK)

    def _process_return(self) -> ResultSet:
        self._current_index = 0
        info = Result.from_frame(self._expect(Command.RETURN_INFO))
        results = []
        for _ in range(max(info.first, 0)):
            frame = self._wait()
            if frame is None:
                raise CommunicationError(f"result frame missing after {self.timeout}s")
            if frame.command not in (Command.RETURN_BLOCK, Command.RETURN_ARROW):
                raise CommunicationError(f"unexpected frame command 0x{frame.command:02X}")
            results.append(Result.from_frame(frame))
        self._results = ResultSet(
            tuple(results), learned_ids=info.second, frame_number=info.third
        )
        return self._results

    def _request(self, command: Command, by_id: Command, id: Optional[int]) -> ResultSet:
        if id is None:
            self._send(command)
        else:
            self._send(by_id, pack_int16s(id))
        return self._process_return()

    def knock(self) -> None:
        """Check that the sensor answers, trying several times."""
        for _ in range(self.KNOCK_ATTEMPTS):
            self._send(Command.REQUEST_KNOCK)
            if self._wait(Command.RETURN_OK) is not None:
                return
        raise CommunicationError(f"no answer after {self.KNOCK_ATTEMPTS} knocks")

    def request(self, id: Optional[int] = None) -> ResultSet:
        return self._request(Command.REQUEST, Command.REQUEST_BY_ID, id)

    def request_blocks(self, id: Optional[int] = None) -> ResultSet:
        return self._request(Command.REQUEST_BLOCKS, Command.REQUEST_BLOCKS_BY_ID, id)

    def request_arrows(self, id: Optional[int] = None) -> ResultSet:
        return self._request(Command.REQUEST_ARROWS, Command.REQUEST_ARROWS_BY_ID, id)

    def request_learned(self) -> ResultSet:
        self._send(Command.REQUEST_LEARNED)
        return self._process_return()

    def request_blocks_learned(self) -> ResultSet:
        self._send(Command.REQUEST_BLOCKS_LEARNED)
        return self._process_return()

    def request_arrows_learned(self) -> ResultSet:
        self._send(Command.REQUEST_ARROWS_LEARNED)
        return self._process_return()

    def available(self) -> int:
        """Number of results not yet returned by read()."""
        total = self._results.count()
        self._current_index = min(self._current_index, total)
        return total - self._current_index

    def read(self) -> Result:
        """Next result of the latest request; MISSING_RESULT once all are read."""
        result = self._results.get(self._current_index)
        self._current_index += 1
        return result

    def is_learned(self, id: Optional[int] = None) -> bool:
        if id is None:
            return self.count_learned_ids() != 0
        return id <= self.count_learned_ids()

    def frame_number(self) -> int:
        return self._results.frame_number

    def count_learned_ids(self) -> int:
        return self._results.learned_ids

    def write_algorithm(self, algorithm: Union[Algorithm, int]) -> None:
        self._send(Command.REQUEST_ALGORITHM, pack_int16s(int(algorithm)))
        self._expect_ok()

    def write_learn(self, id: int) -> None:
        self._send(Command.REQUEST_LEARN, pack_int16s(id))
        self._expect_ok()

    def write_forget(self) -> None:
        self._send(Command.REQUEST_FORGET)
        self._expect_ok()

    def write_sensor(self, sensor0: int, sensor1: int, sensor2: int) -> None:
        self._send(Command.REQUEST_SENSOR, pack_int16s(sensor0, sensor1, sensor2, 0, 0))
        self._expect_ok()

    def set_custom_name(self, name: Union[str, bytes], id: int) -> None:
        self._send(Command.REQUEST_CUSTOMNAMES, pack_custom_name(id, name))
        self._expect_ok()

    def save_picture_to_sd_card(self) -> None:
        self._send(Command.REQUEST_PHOTO)
        self._expect_ok()

    def save_model_to_sd_card(self, file_num: int) -> None:
        self._send(Command.REQUEST_SEND_KNOWLEDGES, pack_int16s(file_num))
        self._expect_ok()

    def load_model_from_sd_card(self, file_num: int) -> None:
        self._send(Command.REQUEST_RECEIVE_KNOWLEDGES, pack_int16s(file_num))
        self._expect_ok()

    def clear_custom_text(self) -> None:
        self._send(Command.REQUEST_CLEAR_TEXT)
        self._expect_ok()

    def custom_text(self, text: Union[str, bytes], x: int, y: int) -> None:
        self._send(Command.REQUEST_CUSTOM_TEXT, pack_custom_text(text, x, y))
        self._expect_ok()

    def save_screenshot_to_sd_card(self) -> None:
        self._send(Command.REQUEST_SAVE_SCREENSHOT)
        self._expect_ok()

    def is_pro(self) -> bool:
        """Whether the sensor reports itself as the Pro model; False if it does not say."""
        self._send(Command.REQUEST_IS_PRO, pack_int16s(0))
        frame = self._wait(Command.REQUEST_IS_PRO, Command.RETURN_INFO)
        if frame is None or frame.command != Command.REQUEST_IS_PRO:
            return False
        return Result.from_frame(frame).first != 0

    def check_firmware_version(self) -> None:
        self.write_firmware_version(FIRMWARE_VERSION)

    def write_firmware_version(self, version: Union[str, bytes]) -> None:
        self._send(Command.REQUEST_FIRMWARE_VERSION, pack_firmware_version(version))
        self._expect_ok()