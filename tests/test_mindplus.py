import pytest

from huskylens.mindplus import (
    ArrowDirectInfo,
    ArrowInfo,
    BlockDirectInfo,
    BlockInfo,
    MindPlusLens,
    ResultType,
)
from huskylens.protocol import Command, FrameDecoder, encode_frame, pack_int16s


class FakeTransport:
    def __init__(self, data=b""):
        self.incoming = bytearray(data)
        self.written = []

    def write(self, data):
        self.written.append(bytes(data))

    def read(self, size):
        chunk = bytes(self.incoming[:size])
        del self.incoming[:size]
        return chunk


class KnockCounter(FakeTransport):
    def __init__(self, answer_on):
        super().__init__()
        self.answer_on = answer_on
        self.knocks = 0
        self._decoder = FrameDecoder()

    def write(self, data):
        super().write(data)
        for frame in self._decoder.decode(data):
            if frame.command == Command.REQUEST_KNOCK:
                self.knocks += 1
                if self.knocks >= self.answer_on:
                    self.incoming += encode_frame(Command.RETURN_OK)


def info(count, learned=0, frame=0):
    return encode_frame(Command.RETURN_INFO, pack_int16s(count, learned, frame, 0, 0))


def block(x, y, w, h, id):
    return encode_frame(Command.RETURN_BLOCK, pack_int16s(x, y, w, h, id))


def arrow(xo, yo, xt, yt, id):
    return encode_frame(Command.RETURN_ARROW, pack_int16s(xo, yo, xt, yt, id))


def lens_with(*frames, learned=0):
    data = info(len(frames), learned) + b"".join(frames)
    lens = MindPlusLens(FakeTransport(data), timeout=0.05)
    lens.request()
    return lens


@pytest.fixture
def mixed():
    return lens_with(
        block(10, 10, 5, 6, 1),
        block(150, 110, 20, 30, 2),
        block(300, 200, 7, 8, 1),
        arrow(0, 0, 40, 40, 3),
        arrow(100, 100, 220, 140, 0),
        learned=3,
    )


def test_result_type_raw_values_select_kind(mixed):
    assert mixed.read_count(0) == mixed.read_count(ResultType.BLOCK) == 3
    assert mixed.read_count(1) == mixed.read_count(ResultType.ARROW) == 2


def test_is_appear(mixed):
    assert mixed.is_appear(1, ResultType.BLOCK) is True
    assert mixed.is_appear(3, ResultType.BLOCK) is False
    assert mixed.is_appear(3, ResultType.ARROW) is True
    assert mixed.is_appear(2, ResultType.ARROW) is False


def test_is_appear_direct_empty_and_full(mixed):
    empty = lens_with()
    assert empty.is_appear_direct(ResultType.BLOCK) is False
    assert empty.is_appear_direct(ResultType.ARROW) is False
    assert mixed.is_appear_direct(ResultType.BLOCK) is True
    assert mixed.is_appear_direct(ResultType.ARROW) is True


def test_read_block_parameter_by_id(mixed):
    assert mixed.read_block_parameter(1) == BlockInfo(10, 10, 5, 6)
    assert mixed.read_block_parameter(1, 2) == BlockInfo(300, 200, 7, 8)
    assert mixed.read_block_parameter(1, 3) == BlockInfo(-1, -1, -1, -1)


def test_read_arrow_parameter_by_id(mixed):
    assert mixed.read_arrow_parameter(3) == ArrowInfo(0, 0, 40, 40)
    assert mixed.read_arrow_parameter(7) == ArrowInfo(-1, -1, -1, -1)


def test_block_nearest_centre(mixed):
    assert mixed.read_block_center_parameter_direct() == BlockDirectInfo(
        150, 110, 20, 30, 2
    )


def test_block_nearest_centre_tie_keeps_first():
    lens = lens_with(block(150, 120, 1, 1, 4), block(170, 120, 2, 2, 5))
    assert lens.read_block_center_parameter_direct().id == 4


def test_arrow_nearest_centre_uses_midpoint(mixed):
    assert mixed.read_arrow_center_parameter_direct() == ArrowDirectInfo(
        100, 100, 220, 140, 0
    )


def test_centre_lookups_without_results():
    lens = lens_with()
    assert lens.read_block_center_parameter_direct() == BlockDirectInfo(-1, -1, -1, -1, -1)
    assert lens.read_arrow_center_parameter_direct() == ArrowDirectInfo(-1, -1, -1, -1, -1)


def test_read_learned_id_count(mixed):
    assert mixed.read_learned_id_count() == 3


def test_read_count_learned(mixed):
    assert mixed.read_count_learned(ResultType.BLOCK) == 3
    assert mixed.read_count_learned(ResultType.ARROW) == 1


def test_read_id_learned(mixed):
    assert mixed.read_id_learned(1, ResultType.BLOCK) == 2
    assert mixed.read_id_learned(0, ResultType.ARROW) == 3
    assert mixed.read_id_learned(1, ResultType.ARROW) == -1


def test_read_count(mixed):
    assert mixed.read_count(ResultType.BLOCK) == 3
    assert mixed.read_count(ResultType.ARROW) == 2
    assert mixed.read_count(ResultType.BLOCK, 1) == 2
    assert mixed.read_count(ResultType.ARROW, 1) == 0


def test_read_parameter_direct(mixed):
    assert mixed.read_block_parameter_direct(2) == BlockDirectInfo(150, 110, 20, 30, 2)
    assert mixed.read_arrow_parameter_direct(2) == ArrowDirectInfo(100, 100, 220, 140, 0)
    assert mixed.read_block_parameter_direct(0) == BlockDirectInfo(-1, -1, -1, -1, -1)
    assert mixed.read_arrow_parameter_direct(3) == ArrowDirectInfo(-1, -1, -1, -1, -1)


def test_direct_matches_sequential_index(mixed):
    for index in range(1, mixed.read_count(ResultType.BLOCK) + 1):
        info_ = mixed.read_block_parameter_direct(index)
        assert mixed.results.get_block(index - 1).x_center == info_.x_center


def test_unknown_kind_raises(mixed):
    with pytest.raises(ValueError):
        mixed.read_count(5)
    with pytest.raises(ValueError):
        mixed.is_appear_direct(2)


def test_connect_until_success_retries():
    transport = KnockCounter(answer_on=7)
    lens = MindPlusLens(transport, timeout=0.001)
    lens.connect_until_success(interval=0)
    assert transport.knocks == 7
    assert all(
        data == encode_frame(Command.REQUEST_KNOCK) for data in transport.written
    )