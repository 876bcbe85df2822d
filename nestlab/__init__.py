"""Vector maths, tagged binary serialization, MIDI controller state, frame capture and input helpers."""

__version__ = "0.1.0"

__all__ = [
    "scalar",
    "vectors",
    "serial_stream",
    "serial_schema",
    "midi_state",
    "devmidi",
    "recorder",
    "widgets",
    "keys",
]