"""
Keypad Unit Tests
=================

Tests for the 16-key keypad: physical key mapping, double buffering and
the helpers used by the key-wait instruction.
"""

import pytest
from chip8_vm.emulator import Keypad, KEYMAP, NUM_KEYS


# =============================================================================
# Key Map
# =============================================================================

class TestKeymap:

    def test_sixteen_entries(self):
        """Key map covers each logical key exactly once."""
        assert len(KEYMAP) == NUM_KEYS
        assert sorted(KEYMAP.values()) == list(range(16))

    def test_conventional_layout(self):
        assert KEYMAP["1"] == 0x1
        assert KEYMAP["4"] == 0xC
        assert KEYMAP["X"] == 0x0
        assert KEYMAP["V"] == 0xF

    def test_custom_keymap(self):
        kp = Keypad(keymap={"SPACE": 0x5})
        kp.poll({"space"})
        assert kp.is_pressed(0x5)


# =============================================================================
# Polling
# =============================================================================

class TestPoll:

    @pytest.fixture
    def kp(self):
        return Keypad()

    def test_initial_state(self, kp):
        """No keys pressed initially."""
        assert kp.pressed_keys() == []
        assert kp.first_pressed() is None

    def test_poll_sets_mapped_keys(self, kp):
        kp.poll({"Q", "V"})
        assert kp.pressed_keys() == [0x4, 0xF]

    def test_poll_case_insensitive(self, kp):
        kp.poll(["w"])
        assert kp.is_pressed(0x5)

    def test_poll_replaces_state(self, kp):
        """Keys missing from a later poll are released."""
        kp.poll({"Q"})
        kp.poll({"W"})
        assert not kp.is_pressed(0x4)
        assert kp.is_pressed(0x5)

    def test_poll_ignores_unknown(self, kp):
        kp.poll({"ESCAPE", "P"})
        assert kp.pressed_keys() == []

    def test_set_keys(self, kp):
        states = [False] * 16
        states[0xA] = True
        kp.set_keys(states)
        assert kp.pressed_keys() == [0xA]

    def test_set_keys_wrong_length(self, kp):
        with pytest.raises(ValueError):
            kp.set_keys([True] * 15)

    def test_key_down_up(self, kp):
        kp.key_down(0x3)
        assert kp.is_pressed(0x3)
        kp.key_up(0x3)
        assert not kp.is_pressed(0x3)

    def test_invalid_key_index(self, kp):
        with pytest.raises(ValueError):
            kp.key_down(16)
        with pytest.raises(ValueError):
            kp.is_pressed(-1)


# =============================================================================
# Edges and Key-Wait Helpers
# =============================================================================

class TestEdges:

    @pytest.fixture
    def kp(self):
        return Keypad()

    def test_just_pressed(self, kp):
        kp.key_down(0x2)
        assert kp.just_pressed(0x2)
        kp.snapshot_previous()
        assert not kp.just_pressed(0x2)
        assert kp.is_pressed(0x2)

    def test_just_released(self, kp):
        kp.key_down(0x2)
        kp.snapshot_previous()
        kp.key_up(0x2)
        assert kp.just_released(0x2)
        kp.snapshot_previous()
        assert not kp.just_released(0x2)

    def test_first_pressed_lowest(self, kp):
        kp.key_down(0xE)
        kp.key_down(0x3)
        assert kp.first_pressed() == 0x3

    def test_consume(self, kp):
        """Consumed key is released until the next poll re-asserts it."""
        kp.poll({"E"})
        kp.consume(0x6)
        assert kp.first_pressed() is None
        kp.poll({"E"})
        assert kp.first_pressed() == 0x6

    def test_clear(self, kp):
        kp.key_down(0x1)
        kp.snapshot_previous()
        kp.clear()
        assert kp.pressed_keys() == []
        assert not kp.just_released(0x1)
