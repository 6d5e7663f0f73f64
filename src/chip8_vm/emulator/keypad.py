"""
Keypad Controller for CHIP-8 VM
===============================

The CHIP-8 has a 16-key hexadecimal keypad. Hosts conventionally map it
onto the left-hand block of a QWERTY keyboard:

    CHIP-8 keypad        Physical keys
    -------------        -------------
    1  2  3  C           1  2  3  4
    4  5  6  D           Q  W  E  R
    7  8  9  E           A  S  D  F
    A  0  B  F           Z  X  C  V

Key state is double-buffered: the host polls physical keys at the start
of a frame, and snapshot_previous() copies the current states into the
previous-frame buffer at the end of it, so edges can be queried.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence


NUM_KEYS = 16

# Physical key name -> logical key index
KEYMAP: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "Q": 0x4, "W": 0x5, "E": 0x6, "R": 0xD,
    "A": 0x7, "S": 0x8, "D": 0x9, "F": 0xE,
    "Z": 0xA, "X": 0x0, "C": 0xB, "V": 0xF,
}


@dataclass
class KeypadState:
    current: List[bool] = field(default_factory=lambda: [False] * NUM_KEYS)
    previous: List[bool] = field(default_factory=lambda: [False] * NUM_KEYS)


class Keypad:
    """
    16-key hex keypad with previous-frame snapshot.

    Example:
        >>> kp = Keypad()
        >>> kp.poll({"W"})
        >>> kp.is_pressed(0x5)
        True
        >>> kp.just_pressed(0x5)
        True
        >>> kp.snapshot_previous()
        >>> kp.just_pressed(0x5)
        False
    """

    def __init__(self, keymap: Optional[Dict[str, int]] = None):
        """
        Initialize keypad.

        Args:
            keymap: Physical key name to logical key map (default KEYMAP)
        """
        self._keymap = dict(keymap or KEYMAP)
        self._state = KeypadState()

    @property
    def keymap(self) -> Dict[str, int]:
        """Physical-to-logical key map (copy)."""
        return dict(self._keymap)

    @staticmethod
    def _check_key(key: int) -> None:
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be 0-15, got {key}")

    # =========================================================================
    # Host Input API
    # =========================================================================

    def poll(self, pressed: Iterable[str]) -> None:
        """
        Replace all key states from the set of physical keys held down.

        Args:
            pressed: Physical key names currently down (case-insensitive).
                     Names missing from the keymap are ignored.
        """
        held = {name.upper() for name in pressed}
        states = [False] * NUM_KEYS
        for name, key in self._keymap.items():
            if name.upper() in held:
                states[key] = True
        self._state.current = states

    def set_keys(self, states: Sequence[bool]) -> None:
        """
        Replace all 16 logical key states.

        Raises:
            ValueError: If states does not have exactly 16 entries
        """
        if len(states) != NUM_KEYS:
            raise ValueError(f"Expected {NUM_KEYS} key states, got {len(states)}")
        self._state.current = [bool(s) for s in states]

    def key_down(self, key: int) -> None:
        """Press a logical key (0-15)."""
        self._check_key(key)
        self._state.current[key] = True

    def key_up(self, key: int) -> None:
        """Release a logical key (0-15)."""
        self._check_key(key)
        self._state.current[key] = False

    def snapshot_previous(self) -> None:
        """Copy current states into the previous-frame buffer."""
        self._state.previous = list(self._state.current)

    def clear(self) -> None:
        """Release every key in both buffers."""
        self._state = KeypadState()

    # =========================================================================
    # Engine Queries
    # =========================================================================

    def is_pressed(self, key: int) -> bool:
        self._check_key(key)
        return self._state.current[key]

    def just_pressed(self, key: int) -> bool:
        """Pressed now but not at the last snapshot."""
        self._check_key(key)
        return self._state.current[key] and not self._state.previous[key]

    def just_released(self, key: int) -> bool:
        """Released now but pressed at the last snapshot."""
        self._check_key(key)
        return self._state.previous[key] and not self._state.current[key]

    def first_pressed(self) -> Optional[int]:
        """Lowest-numbered key currently pressed, or None."""
        for key, down in enumerate(self._state.current):
            if down:
                return key
        return None

    def consume(self, key: int) -> None:
        """
        Clear a press so the key-wait does not pick it up again.

        The host's next poll re-asserts the key if it is still held.
        """
        self._check_key(key)
        self._state.current[key] = False

    def pressed_keys(self) -> List[int]:
        """All logical keys currently pressed, in ascending order."""
        return [key for key, down in enumerate(self._state.current) if down]
