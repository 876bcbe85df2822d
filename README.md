# nestlab

Building blocks for small interactive tools and prototypes.

- **`nestlab.scalar`**: scalar helpers `sq`, `clamp`, `saturate`, `sign`,
  `fract`, `mod`, `step`, `ramp`, `smoothstep`, `smootherstep` and `lerp`.
- **`nestlab.vectors`**: 2, 3 and 4 component vectors. `Vector` holds floats,
  `IntVector` holds 32-bit signed integers and `UIntVector` holds 32-bit
  unsigned integers, and both of these wrap on overflow. `BoolVector` holds
  booleans. Arithmetic works component by component. `==` compares whole
  vectors. The methods `eq`, `lt` and the other comparison methods return a
  `BoolVector`. The module also has `dot`, `length`, `length_sq`,
  `normalize`, `normalize_or_zero`, `cross`, `det`, `minimum`, `maximum`,
  `clamp`, `isnan` and `elementwise`.
- **`nestlab.serial_stream`**: `ByteStream`, a byte stream with an interned
  string table, varint sizes and a CRC trailer. It also has `hex_encode` and
  `hex_decode`.
- **`nestlab.serial_schema`**: tolerant save and load of nested records.
  Each member is tagged with a type name and a field name, so a record still
  loads after fields have been added, removed or reordered. A field that is
  not found keeps its current value. The building blocks are `StructSchema`,
  `Field`, `ArrayOf` and the `Pod` types `U8`, `S8`, `U16`, `S16`, `U32`,
  `S32`, `FLOAT`, `BOOL`, `CHAR`, `VEC2`, `VEC3` and `VEC4`. The functions
  are `save_bytes`, `load_bytes`, `save_to_file` and `load_from_file`.
- **`nestlab.midi_state`**: `MidiHub`, which keeps per-device note counts
  and controller values built from raw MIDI messages. Controllers can be
  absolute or relative (`ContinuousMode`).
- **`nestlab.devmidi`**: `DevMidi`, which binds values to a 4x4 knob
  controller ("twister") and a button pad ("fighter"). It keeps two frames
  of state and offers sliders, click-to-default, click-to-toggle, colour
  editing, checkboxes and radio buttons.
- **`nestlab.recorder`**: `Recorder`, which collects capture regions each
  frame and writes numbered PNG screenshots.
- **`nestlab.widgets`**: editing-widget descriptions (`Widget`,
  `slider_float`, `slider_int`, ...) and the helpers `format_bits` and
  `clamp_u8`.
- **`nestlab.keys`**: key, mouse-button and pad-button codes (`Key`,
  `MouseButton`, `PadButton`) and per-frame press and release tracking
  (`ButtonStates`, `MouseState`).

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Vector maths:

```python
from nestlab.vectors import Vector, dot, normalize, cross

a = Vector(1.0, 2.0, 2.0)
b = Vector(0.0, 1.0, 0.0)
print(dot(a, b))          # 2.0
print(normalize(a))
print(cross(a, b))
print(a.lt(b).any())      # True
```

Saving and loading a record:

```python
from dataclasses import dataclass
from nestlab.serial_schema import FLOAT, S32, Field, StructSchema, save_bytes, load_bytes

@dataclass
class Settings:
    speed: float = 1.0
    count: int = 3

schema = StructSchema(Settings, [
    Field("speed", FLOAT),
    Field("count", S32),
])

data = save_bytes(Settings(2.5, 7), schema, "Settings", "settings")
restored = load_bytes(data, schema, "Settings", "settings")
print(restored)           # Settings(speed=2.5, count=7)
```

`load_bytes` raises `CorruptStreamError` when the checksum does not match.

Feeding MIDI messages and reading controller state:

```python
from nestlab.midi_state import MidiDeviceConfig, MidiHub, ContinuousMode
from nestlab.devmidi import DevMidi

hub = MidiHub([
    MidiDeviceConfig("Midi Fighter Twister", ContinuousMode.RELATIVE),
    MidiDeviceConfig("Midi Fighter 3D"),
])
(device,) = hub.attach("Midi Fighter Twister")
hub.handle_message(device, [0xB0, 0x00, 0x41])   # controller 0, one step clockwise
midi = DevMidi(hub)
midi.update()
print(midi.twister_knob_delta(12))               # 1: knob 12 is controller 0
```

Taking a screenshot. `read_pixels` must return RGBA bytes in bottom-up row
order:

```python
from nestlab.recorder import Recorder

rec = Recorder("screenshots")
rec.snap()
rec.frame("main", 0, 0, 2, 2, 640, 480, lambda x, y, w, h: bytes(w * h * 4))
print(rec.update())       # screenshots/capture.png
rec.end_ui()
```

## What it does not do

- The package does not open windows, draw widgets or talk to a graphics API.
  The widget descriptions only describe a widget. Cursor positions, pixels
  and button states come from your own code.
- It does not open MIDI devices. You pass messages to `MidiHub.handle_message`
  yourself.
- While recording, `Recorder` only counts the captured frames in
  `recorded_frames`. It writes no animation or video. Only screenshots are
  saved to disk.