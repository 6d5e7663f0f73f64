"""
Delay and Sound Timers
======================

Both timers are 8-bit counters that count down towards zero at the frame
rate (60 Hz on real interpreters). The host decays them once per frame
via tick(), never once per instruction. While the sound timer is non-zero
the host should play its tone.
"""

from dataclasses import dataclass


@dataclass
class TimerState:
    delay: int = 0
    sound: int = 0


class Timers:
    """
    Delay and sound timers.

    Example:
        >>> timers = Timers()
        >>> timers.sound = 2
        >>> timers.sound_active()
        True
        >>> timers.tick(); timers.tick()
        >>> timers.sound_active()
        False
    """

    def __init__(self):
        self._state = TimerState()

    @property
    def delay(self) -> int:
        """Delay timer (8-bit)."""
        return self._state.delay

    @delay.setter
    def delay(self, value: int) -> None:
        self._state.delay = value & 0xFF

    @property
    def sound(self) -> int:
        """Sound timer (8-bit)."""
        return self._state.sound

    @sound.setter
    def sound(self, value: int) -> None:
        self._state.sound = value & 0xFF

    def tick(self) -> None:
        """Decrement each non-zero timer by one."""
        if self._state.delay > 0:
            self._state.delay -= 1
        if self._state.sound > 0:
            self._state.sound -= 1

    def sound_active(self) -> bool:
        """True while the sound timer is running."""
        return self._state.sound > 0

    def reset(self) -> None:
        self._state = TimerState()
