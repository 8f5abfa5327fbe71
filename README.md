# huskylens

A pure-Python client for the HuskyLens AI vision sensor. It implements the sensor's frame
protocol: framing, checksums and payload encoding. On top of that it can request detected
blocks and arrows, switch algorithms, learn and forget IDs, name IDs, draw custom text on the
screen, and ask the sensor to save pictures, screenshots and models to its SD card.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Transports

The client does not open any port itself. You give it a transport object with two methods:

- `write(data: bytes)` sends bytes to the sensor;
- `read(size: int) -> bytes` returns at most `size` bytes that are already available,
  possibly none, without blocking for long.

A serial port object opened with a zero or short read timeout fits this shape. For I2C you
write a small wrapper around your bus library; the sensor's I2C address is available as
`huskylens.protocol.I2C_ADDRESS`.

## Usage

```python
from huskylens.client import HuskyLens
from huskylens.protocol import Algorithm

lens = HuskyLens(transport, timeout=0.1)
lens.knock()
lens.write_algorithm(Algorithm.OBJECT_TRACKING)

lens.request()
while lens.available():
    result = lens.read()
    if result.is_block:
        print(result.id, result.x_center, result.y_center, result.width, result.height)
```

`request`, `request_blocks` and `request_arrows` take an optional ID. The `request_*_learned`
methods ask only for learned results. Each of them returns a `huskylens.results.ResultSet`,
which is also kept as `lens.results`. It has `count`, `count_blocks`, `count_arrows`, `get`,
`get_block`, `get_arrow` and the `*_learned` variants, along with `learned_ids` and
`frame_number`. A lookup that finds nothing returns `huskylens.results.MISSING_RESULT`,
whose fields are all -1.

Other commands are `write_learn`, `write_forget`, `write_sensor`, `set_custom_name`,
`custom_text`, `clear_custom_text`, `save_picture_to_sd_card`, `save_screenshot_to_sd_card`,
`save_model_to_sd_card`, `load_model_from_sd_card`, `write_firmware_version` and
`check_firmware_version`. Each waits for the sensor's OK reply. `is_pro()` returns `False`
when the sensor gives no answer.

### Errors

- `huskylens.client.CommunicationError` is raised when the sensor does not give the expected
  reply within the timeout. `knock()` raises it only after five failed attempts.
- `huskylens.protocol.ProtocolError` is raised for payloads too large for a frame and for
  reads past the end of a frame's content.
- `ValueError` is raised for names and custom texts longer than 20 bytes.

### Simplified helpers

`huskylens.mindplus.MindPlusLens` extends the client with helpers keyed by
`ResultType.BLOCK` / `ResultType.ARROW` and 1-based indices:

```python
from huskylens.mindplus import MindPlusLens, ResultType

lens = MindPlusLens(transport)
lens.connect_until_success(0.1)
lens.request()
if lens.is_appear_direct(ResultType.BLOCK):
    block = lens.read_block_center_parameter_direct()
    print(block.id, block.x_center, block.y_center)
```

It also provides `is_appear`, `read_block_parameter`, `read_arrow_parameter`,
`read_block_parameter_direct`, `read_arrow_parameter_direct`,
`read_arrow_center_parameter_direct`, `read_count`, `read_count_learned`, `read_id_learned`
and `read_learned_id_count`. They return the records `BlockInfo`, `ArrowInfo`,
`BlockDirectInfo` and `ArrowDirectInfo`. The "center" lookups pick the result nearest the
middle of the 320×240 frame. `connect_until_success` keeps knocking until the sensor answers.

### Working with raw frames

`huskylens.protocol` can be used on its own. `encode_frame` builds outgoing frames.
`FrameDecoder.feed` / `decode` turn incoming bytes into checksum-verified `Frame` objects, and
`Frame.reader()` gives a `PayloadReader` for their contents. `pack_int16s`,
`pack_custom_name`, `pack_custom_text` and `pack_firmware_version` build request payloads.

## What it does not do

The package has no command-line tool and does not open serial ports or I2C buses. Connecting
to the hardware is left to the transport you supply. It does not receive photos,
screenshots or model files from the sensor. The SD-card commands only ask the sensor to
store them.