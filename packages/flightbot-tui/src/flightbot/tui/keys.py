"""Keyboard sequence decoding.

Maps one complete key sequence (as emitted by
:class:`~flightbot.tui.stdin_buffer.StdinBuffer`) to a key identifier such
as ``"a"``, ``"ctrl+c"``, ``"shift+tab"`` or ``"pageUp"``, and wraps it in a
:class:`KeyEvent` for dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass

KeyId = str


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    insert = "insert"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    f1 = "f1"
    f2 = "f2"
    f3 = "f3"
    f4 = "f4"
    f5 = "f5"
    f6 = "f6"
    f7 = "f7"
    f8 = "f8"
    f9 = "f9"
    f10 = "f10"
    f11 = "f11"
    f12 = "f12"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# ---------------------------------------------------------------------------
# Escape sequence tables
# ---------------------------------------------------------------------------

# Final byte of ``ESC [ X`` / ``ESC O X`` and its ``ESC [ 1 ; m X`` variants.
_LETTER_KEYS: dict[str, str] = {
    "A": Key.up,
    "B": Key.down,
    "C": Key.right,
    "D": Key.left,
    "H": Key.home,
    "F": Key.end,
    "P": Key.f1,
    "Q": Key.f2,
    "R": Key.f3,
    "S": Key.f4,
}

# Number of ``ESC [ n ~`` and its ``ESC [ n ; m ~`` variants.
_TILDE_KEYS: dict[int, str] = {
    1: Key.home,
    2: Key.insert,
    3: Key.delete,
    4: Key.end,
    5: Key.page_up,
    6: Key.page_down,
    7: Key.home,
    8: Key.end,
    11: Key.f1,
    12: Key.f2,
    13: Key.f3,
    14: Key.f4,
    15: Key.f5,
    17: Key.f6,
    18: Key.f7,
    19: Key.f8,
    20: Key.f9,
    21: Key.f10,
    23: Key.f11,
    24: Key.f12,
}


def _legacy_table() -> dict[str, str]:
    table: dict[str, str] = {}
    for letter, name in _LETTER_KEYS.items():
        table["\x1bO" + letter] = name
        # ESC [ P..S are not function keys in any terminal we care about
        if letter not in "PQRS":
            table["\x1b[" + letter] = name
    for number, name in _TILDE_KEYS.items():
        table[f"\x1b[{number}~"] = name
    # Linux console function keys
    for letter, name in zip("ABCD", (Key.f1, Key.f2, Key.f3, Key.f4)):
        table["\x1b[[" + letter] = name
    table["\x1b[Z"] = Key.shift(Key.tab)
    return table


LEGACY_KEY_SEQUENCES: dict[str, str] = _legacy_table()

_CONTROL_KEYS: dict[str, str] = {
    "\x1b": Key.escape,
    "\r": Key.enter,
    "\n": Key.enter,
    "\t": Key.tab,
    " ": Key.space,
    "\x7f": Key.backspace,
    "\x08": Key.backspace,
    "\x00": Key.ctrl(Key.space),
}


def _modifier_prefix(param: int) -> str | None:
    """xterm encodes modifiers as 1 + (shift | alt << 1 | ctrl << 2)."""
    bits = param - 1
    if not 1 <= bits <= 7:
        return None
    prefix = ""
    if bits & 4:
        prefix += "ctrl+"
    if bits & 1:
        prefix += "shift+"
    if bits & 2:
        prefix += "alt+"
    return prefix


def _modified_key(data: str) -> str | None:
    """``ESC [ 1 ; m X``, ``ESC [ n ; m ~`` and ``ESC O m X``."""
    if data.startswith("\x1bO") and len(data) == 4 and data[2].isdigit():
        prefix = _modifier_prefix(int(data[2]))
        name = _LETTER_KEYS.get(data[3])
        return prefix + name if prefix and name else None

    if not data.startswith("\x1b[") or len(data) < 6:
        return None
    number, sep, modifier = data[2:-1].partition(";")
    if not sep or not number.isdigit() or not modifier.isdigit():
        return None
    prefix = _modifier_prefix(int(modifier))
    if prefix is None:
        return None
    final = data[-1]
    if final == "~":
        name = _TILDE_KEYS.get(int(number))
    else:
        name = _LETTER_KEYS.get(final) if number == "1" else None
    return prefix + name if name else None


def _ctrl_letter(ch: str) -> str | None:
    code = ord(ch)
    return chr(code + 96) if 1 <= code <= 26 else None


def _alt_key(ch: str) -> str | None:
    if ch == "\x1b":
        return Key.alt(Key.escape)
    named = _CONTROL_KEYS.get(ch)
    if named in (Key.enter, Key.backspace):
        return Key.alt(named)
    letter = _ctrl_letter(ch)
    if letter is not None:
        return "ctrl+alt+" + letter
    if ch.isupper():
        return "shift+alt+" + ch.lower()
    if ch.isprintable():
        return Key.alt(ch.lower())
    return None


def parse_key(data: str) -> KeyId | None:
    """Key identifier for one complete key sequence, or None if unknown."""
    if not data:
        return None
    named = LEGACY_KEY_SEQUENCES.get(data) or _CONTROL_KEYS.get(data)
    if named is not None:
        return named
    if data[0] == "\x1b":
        if len(data) == 2:
            return _alt_key(data[1])
        return _modified_key(data)
    if len(data) == 1:
        letter = _ctrl_letter(data)
        if letter is not None:
            return Key.ctrl(letter)
        if data.isprintable():
            return data
    return None


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A decoded keystroke.

    ``name`` is the base key without modifiers (``"c"`` for ctrl+c,
    ``"tab"`` for shift+tab); ``text`` is the literal text the key would
    insert, or ``""`` for keys that insert nothing.
    """

    name: str
    sequence: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    text: str = ""

    @property
    def key_id(self) -> KeyId:
        prefix = ""
        if self.ctrl:
            prefix += "ctrl+"
        if self.shift:
            prefix += "shift+"
        if self.meta:
            prefix += "alt+"
        return prefix + self.name

    def matches(self, key_id: KeyId) -> bool:
        return self.key_id == key_id


def decode_key(data: str) -> KeyEvent:
    """Decode one key sequence into a :class:`KeyEvent`.

    Unrecognized sequences decode to a nameless event whose ``text`` is
    the sequence itself when it is printable (multi-character input such
    as a composed character or paste), and empty otherwise.
    """
    key_id = parse_key(data)
    if key_id is None:
        printable = data if data and data.isprintable() else ""
        return KeyEvent(name="", sequence=data, text=printable)

    ctrl = meta = shift = False
    name = key_id
    while True:
        if name.startswith("ctrl+") and len(name) > 5:
            ctrl, name = True, name[5:]
        elif name.startswith("shift+") and len(name) > 6:
            shift, name = True, name[6:]
        elif name.startswith("alt+") and len(name) > 4:
            meta, name = True, name[4:]
        else:
            break

    text = ""
    if not ctrl and not meta:
        if name == "space":
            text = " "
        elif len(name) == 1:
            text = data
    return KeyEvent(name=name, sequence=data, ctrl=ctrl, meta=meta, shift=shift, text=text)
