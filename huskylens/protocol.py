"""Wire format of the HuskyLens serial/I2C protocol.

A frame is laid out as::

    0x55 0xAA <address> <content size> <command> <content...> <checksum>

where the checksum is the low byte of the sum of every preceding byte.
Multi-byte integers in the content are little-endian.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional, Union

HEADER = b"\x55\xaa"
DEFAULT_ADDRESS = 0x11
I2C_ADDRESS = 0x32
FIRMWARE_VERSION = "0.4.1"

FRAME_BUFFER_SIZE = 128
_HEADER_AND_CHECKSUM = 6
MAX_CONTENT_SIZE = FRAME_BUFFER_SIZE - _HEADER_AND_CHECKSUM - 1
MAX_TEXT_LENGTH = 20

_CONTENT_SIZE_INDEX = 3
_COMMAND_INDEX = 4
_CONTENT_INDEX = 5


class Command(IntEnum):
    """Command byte of a frame."""

    REQUEST = 0x20
    REQUEST_BLOCKS = 0x21
    REQUEST_ARROWS = 0x22
    REQUEST_LEARNED = 0x23
    REQUEST_BLOCKS_LEARNED = 0x24
    REQUEST_ARROWS_LEARNED = 0x25
    REQUEST_BY_ID = 0x26
    REQUEST_BLOCKS_BY_ID = 0x27
    REQUEST_ARROWS_BY_ID = 0x28
    RETURN_INFO = 0x29
    RETURN_BLOCK = 0x2A
    RETURN_ARROW = 0x2B
    REQUEST_KNOCK = 0x2C
    REQUEST_ALGORITHM = 0x2D
    RETURN_OK = 0x2E
    REQUEST_CUSTOMNAMES = 0x2F
    REQUEST_PHOTO = 0x30
    REQUEST_SEND_PHOTO = 0x31
    REQUEST_SEND_KNOWLEDGES = 0x32
    REQUEST_RECEIVE_KNOWLEDGES = 0x33
    REQUEST_CUSTOM_TEXT = 0x34
    REQUEST_CLEAR_TEXT = 0x35
    REQUEST_LEARN = 0x36
    REQUEST_FORGET = 0x37
    REQUEST_SEND_SCREENSHOT = 0x38
    REQUEST_SAVE_SCREENSHOT = 0x39
    REQUEST_LOAD_AI_FRAME_FROM_USB = 0x3A
    REQUEST_IS_PRO = 0x3B
    REQUEST_FIRMWARE_VERSION = 0x3C
    REQUEST_SENSOR = 0x3D


class Algorithm(IntEnum):
    """Recognition algorithms the sensor can switch to."""

    FACE_RECOGNITION = 0
    OBJECT_TRACKING = 1
    OBJECT_RECOGNITION = 2
    LINE_TRACKING = 3
    COLOR_RECOGNITION = 4
    TAG_RECOGNITION = 5
    OBJECT_CLASSIFICATION = 6


class ProtocolError(Exception):
    """A frame could not be built or its content could not be read."""


def checksum(data: Union[bytes, bytearray, Iterable[int]]) -> int:
    """Return the low byte of the sum of ``data``."""
    return sum(data) & 0xFF


class PayloadReader:
    """Sequential little-endian reader over a frame's content."""

    def __init__(self, content: Union[bytes, bytearray]) -> None:
        self._content = bytes(content)
        self._offset = 0

    def _unpack(self, fmt: str):
        size = struct.calcsize(fmt)
        if self._offset + size > len(self._content):
            raise ProtocolError(
                f"content too short: need {size} byte(s) at offset {self._offset}, "
                f"have {len(self._content) - self._offset}"
            )
        (value,) = struct.unpack_from(fmt, self._content, self._offset)
        self._offset += size
        return value

    def read_uint8(self) -> int:
        return self._unpack("<B")

    def read_int16(self) -> int:
        return self._unpack("<h")

    def read_int32(self) -> int:
        return self._unpack("<i")

    def read_float(self) -> float:
        return self._unpack("<f")

    def at_end(self) -> bool:
        """True once every byte of the content has been read."""
        return self._offset == len(self._content)


@dataclass(frozen=True)
class Frame:
    """A decoded frame: its command byte, content and address."""

    command: int
    content: bytes = b""
    address: int = DEFAULT_ADDRESS

    def reader(self) -> PayloadReader:
        return PayloadReader(self.content)


class FrameDecoder:
    """Incremental frame parser fed one byte at a time."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def _reset(self) -> None:
        self._buffer.clear()

    def feed(self, byte: int) -> Optional[Frame]:
        """Consume one byte; return a frame when one completes with a valid checksum."""
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"not a byte: {byte!r}")
        position = len(self._buffer)
        if position == 0:
            if byte != HEADER[0]:
                return None
        elif position == 1:
            if byte != HEADER[1]:
                self._reset()
                return None
        elif position == _CONTENT_SIZE_INDEX:
            if byte > MAX_CONTENT_SIZE:
                self._reset()
                return None
        self._buffer.append(byte)

        if position < _COMMAND_INDEX:
            return None
        if len(self._buffer) < self._buffer[_CONTENT_SIZE_INDEX] + _HEADER_AND_CHECKSUM:
            return None

        raw = bytes(self._buffer)
        self._reset()
        if checksum(raw[:-1]) != raw[-1]:
            return None
        return Frame(
            command=raw[_COMMAND_INDEX],
            content=raw[_CONTENT_INDEX:-1],
            address=raw[2],
        )

    def decode(self, data: Union[bytes, bytearray, Iterable[int]]) -> List[Frame]:
        """Feed every byte of ``data`` and return the frames completed by it."""
        return [frame for frame in map(self.feed, data) if frame is not None]


def encode_frame(
    command: int,
    payload: Union[bytes, bytearray] = b"",
    address: int = DEFAULT_ADDRESS,
) -> bytes:
    """Build a complete frame carrying ``payload``."""
    payload = bytes(payload)
    if len(payload) > MAX_CONTENT_SIZE:
        raise ProtocolError(
            f"payload of {len(payload)} bytes exceeds {MAX_CONTENT_SIZE} bytes"
        )
    body = HEADER + bytes([address, len(payload), int(command)]) + payload
    return body + bytes([checksum(body)])


def pack_int16s(*args: int) -> bytes:
    """Pack integers as little-endian int16 values, truncated to 16 bits."""
    return struct.pack(f"<{len(args)}H", *(value & 0xFFFF for value in args))


def _text_bytes(text: Union[str, bytes]) -> bytes:
    data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    if len(data) > MAX_TEXT_LENGTH:
        raise ValueError(
            f"text of {len(data)} bytes exceeds {MAX_TEXT_LENGTH} bytes"
        )
    return data


def pack_custom_name(name_id: int, name: Union[str, bytes]) -> bytes:
    """Content of a custom-name request: id, size, 20-byte name field, NUL."""
    data = _text_bytes(name)
    return (
        bytes([name_id & 0xFF, len(data)])
        + data.ljust(MAX_TEXT_LENGTH, b"\x00")
        + b"\x00"
    )


def pack_custom_text(text: Union[str, bytes], x: int, y: int) -> bytes:
    """Content of a custom-text request: size, x flag, x, y, text, NUL."""
    data = _text_bytes(text)
    x &= 0xFFFF
    x_flag = 0xFF if x >= 255 else 0x00
    return bytes([len(data), x_flag, x & 0xFF, y & 0xFF]) + data + b"\x00"


def pack_firmware_version(version: Union[str, bytes]) -> bytes:
    """Content of a firmware-version request: length byte then the version text."""
    data = version.encode("ascii") if isinstance(version, str) else bytes(version)
    if len(data) > 0xFF:
        raise ValueError(f"version of {len(data)} bytes is too long")
    return bytes([len(data)]) + data