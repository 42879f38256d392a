# mqttcore

Building blocks for an MQTT broker, in plain Python with no runtime dependencies.

## Modules

- `mqttcore.codec` – MQTT wire primitives. Offset-based decoders
  (`decode_uint16`, `decode_bytes`, `decode_string`, `decode_byte`,
  `decode_byte_bool`) return the value and the next offset, and raise
  `CodecError` when the buffer is too short or a string is not valid UTF-8.
  Encoders `encode_bool`, `encode_uint16`, `encode_bytes` and `encode_string`
  produce big-endian, length-prefixed values. Stream helpers
  (`read_uint16`, `read_uint32`, `read_binary`, `read_string`, `write_uint16`,
  `write_uint32`, `write_binary`, `write_string`) work on binary file-like
  objects; the readers raise `EOFError` on a short read. `encode_vbi`,
  `decode_vbi` and `read_vbi_bytes` handle variable byte integers.
- `mqttcore.fixedheader` – the `PacketType` enumeration and the `FixedHeader`
  dataclass (`remaining`, `packet_type`, `qos`, `dup`, `retain`).
  `FixedHeader.encode()` returns the header byte followed by the remaining
  length; `FixedHeader.decode(byte)` fills type and flags from the first byte
  and raises `InvalidFlagsError` when a packet type carries flags it must not.
  `encode_length()` encodes a remaining length. `OversizedLengthError` marks a
  remaining length indicator without a terminator.
- `mqttcore.inflight` – `InflightMessage` and `InflightMap`, a thread-safe
  store of QoS messages keyed on packet id (0–65535). With a capacity above
  zero, adding a new key when full evicts the oldest message.
- `mqttcore.clients` – the `Clients` registry and the `Client` record:
  identification from a CONNECT-like packet (`identify`), last will (`LWT`),
  subscriptions, packet id allocation (wrapping from 65535 to 1), a one-time
  `stop()` that records its cause, `info()` returning a `ClientInfo`, and
  `read_fixed_header()` which reads a fixed header from a binary stream.
  `new_client_stub()` returns a client already marked as stopped.
- `mqttcore.dynstruct` – `Builder` collects field definitions (`FieldConfig`:
  name, example value, tag) and `build()` produces a `DynamicStruct` whose
  `new()` returns a dataclass instance with every field at its zero value.
  `new_struct()`, `extend_struct()` and `merge_structs()` start builders, the
  latter two seeded from existing dataclass instances.
- `mqttcore.structreader` – `new_reader()` wraps a dataclass instance, list or
  dict in a `Reader` with named `Field` access, typed accessors
  (`int8()` … `uint64()`, `float32()`, `float64()`, `string()`, `bool()`,
  `time()`, `interface()`), `to_struct()` for copying into another dataclass
  instance, and `have_same_types()` for comparing declared types.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

Encoding and decoding wire values:

```python
from mqttcore.codec import encode_string, decode_string

data = encode_string("a/b/c")          # b"\x00\x05a/b/c"
topic, offset = decode_string(data, 0)  # ("a/b/c", 7)
```

Fixed headers:

```python
from mqttcore.fixedheader import FixedHeader, PacketType

header = FixedHeader(packet_type=PacketType.PUBLISH, qos=1, remaining=10)
raw = header.encode()                  # b"\x32\x0a"

parsed = FixedHeader().decode(raw[0])
assert parsed.qos == 1
```

Tracking in-flight messages:

```python
from mqttcore.inflight import InflightMap, InflightMessage

inflight = InflightMap(256)
assert inflight.set(1, InflightMessage(packet=None)) is True
message = inflight.get(1)
assert inflight.delete(1) is True
```

Keeping a registry of clients:

```python
from mqttcore.clients import Clients, new_client_stub

registry = Clients()
client = new_client_stub(256)
client.id = "sensor-1"
registry.add(client)
assert len(registry) == 1
```

## What this package does not do

It is a set of parts, not a broker. There is no network listener or server,
no command to run, and no persistence. Apart from the fixed header, it does
not encode or decode whole MQTT packets: `Client.identify()` expects a packet
object supplied by the caller, and `Client` does not read or write packets on
its connection beyond closing it on `stop()`.