#!/usr/bin/env python3
"""
CHIP-8 VM Demo
==============

This script demonstrates how to use the chip8_vm emulator to:
1. Create a machine and load a ROM
2. Drive it one presentation frame at a time
3. Answer a key wait from the host
4. Inspect registers and take screenshots

The ROM is assembled inline: it draws the sixteen hex digits from the
built-in font, waits for a key and then draws the digit of the key
pressed in the bottom-right corner.

Usage:
    source .venv/bin/activate
    python examples/emulator_demo.py
"""

from pathlib import Path
from chip8_vm.emulator import Emulator, EmulatorConfig


DEMO_PROGRAM = [
    0x6000,  # $200  V0 = 0          digit
    0x6100,  # $202  V1 = 0          x
    0x6202,  # $204  V2 = 2          y
    0xF029,  # $206  I = font(V0)
    0xD125,  # $208  draw 5 rows at (V1, V2)
    0x7001,  # $20A  V0 += 1
    0x7108,  # $20C  V1 += 8
    0x3140,  # $20E  skip if V1 == 64
    0x1206,  # $210  next digit
    0x6100,  # $212  V1 = 0
    0x7208,  # $214  V2 += 8
    0x3010,  # $216  skip if V0 == 16
    0x1206,  # $218  next row
    0xF30A,  # $21A  V3 = wait for key
    0x6434,  # $21C  V4 = 52
    0x6518,  # $21E  V5 = 24
    0xF329,  # $220  I = font(V3)
    0xD455,  # $222  draw pressed digit
    0x1224,  # $224  halt
]


def assemble(words):
    return bytes(b for word in words for b in (word >> 8, word & 0xFF))


def main():
    # Output directory for screenshots
    output_dir = Path("trash")
    output_dir.mkdir(exist_ok=True)

    # ==========================================================================
    # 1. Create an emulator instance
    # ==========================================================================
    # instructions_per_frame sets the clock: 11 per 60 Hz frame by default.
    # A fixed seed makes CXNN reproducible.

    print("Creating CHIP-8 machine...")
    emu = Emulator(EmulatorConfig(instructions_per_frame=11, seed=1))
    emu.load_rom(assemble(DEMO_PROGRAM))
    print(f"  {emu}")

    # ==========================================================================
    # 2. Run frames until the program blocks on its key wait
    # ==========================================================================
    # Each run_frame() polls keys, runs the instructions, snapshots the
    # keypad and ticks the timers once.

    print("\nRunning...")
    while not emu.is_waiting_for_key:
        emu.run_frame()
    print(f"  Waiting for key after {emu.frame_count} frames")
    print(emu.display_text)

    # ==========================================================================
    # 3. Press a key
    # ==========================================================================
    # Keys are given as physical names, mapped onto the hex keypad:
    #   1 2 3 4      1 2 3 C
    #   Q W E R  ->  4 5 6 D
    #   A S D F      7 8 9 E
    #   Z X C V      A 0 B F

    print("\nPressing V (key F)...")
    emu.run_frame({"V"})
    emu.run_frame(set())
    print(emu.display_text)

    regs = emu.registers
    print(f"\n  V3={regs['V3']:X} I=${regs['I']:03X} PC=${regs['PC']:03X}")

    # ==========================================================================
    # 4. Take a screenshot
    # ==========================================================================
    img = emu.render_display(scale=8)
    (output_dir / "chip8_demo.png").write_bytes(img)
    print("  Saved chip8_demo.png")

    print(f"\nTotal instructions executed: {emu.instruction_count:,}")
    print(f"Screenshots saved to: {output_dir.absolute()}")


if __name__ == "__main__":
    main()
