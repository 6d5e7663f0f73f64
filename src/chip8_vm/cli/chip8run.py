"""
chip8run - Headless CHIP-8 ROM Runner
=====================================

Runs a ROM for a fixed number of frames without a window and reports the
final screen. Useful for smoke-testing ROMs and for scripted checks.

Usage Examples
--------------
Run two seconds (120 frames) and print the screen:
    $ chip8run maze.ch8 --frames 120

Hold keypad keys (physical names, see keypad.KEYMAP) for the whole run:
    $ chip8run pong.ch8 --key 1 --key Q

Reproducible randomness and a PNG screenshot:
    $ chip8run maze.ch8 --seed 42 --png maze.png --scale 8

Trace every instruction:
    $ chip8run test.ch8 --frames 1 --trace
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import handle_cli_exception
from chip8_vm.emulator import Emulator, EmulatorConfig, Instruction, KEYMAP


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _trace(pc: int, instruction: Instruction) -> None:
    logger.debug(f"${pc:03X}: {instruction}")


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "rom_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-f", "--frames",
    type=click.IntRange(min=0),
    default=60,
    show_default=True,
    help="Number of frames to run",
)
@click.option(
    "--ipf",
    type=click.IntRange(min=1),
    default=None,
    help="Instructions per frame (default: CHIP8_IPF or 11)",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the CXNN random source",
)
@click.option(
    "-k", "--key",
    "keys",
    multiple=True,
    help="Physical key to hold for the whole run (repeatable)",
)
@click.option(
    "--shift-vx",
    is_flag=True,
    help="8XY6/8XYE shift VX in place instead of taking VY",
)
@click.option(
    "--png",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also save the final screen as a PNG file",
)
@click.option(
    "--scale",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="PNG pixel scale",
)
@click.option(
    "--registers/--no-registers",
    default=False,
    help="Print the register file after the run",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Log every executed instruction (implies --verbose)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="chip8run")
def main(
    rom_file: Path,
    frames: int,
    ipf: Optional[int],
    seed: Optional[int],
    keys: Tuple[str, ...],
    shift_vx: bool,
    png: Optional[Path],
    scale: int,
    registers: bool,
    trace: bool,
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 ROM headlessly and print the final screen.

    ROM_FILE is the raw ROM image, loaded at $200.
    """
    verbose = verbose or trace
    setup_logging(verbose)

    try:
        unknown = [k for k in keys if k.upper() not in KEYMAP]
        if unknown:
            raise click.BadParameter(
                f"Unknown key(s) {', '.join(unknown)}; "
                f"valid keys are {''.join(KEYMAP)}",
                param_hint="--key",
            )

        env_config = EmulatorConfig.from_env()
        config = EmulatorConfig(
            instructions_per_frame=ipf or env_config.instructions_per_frame,
            shift_uses_vy=env_config.shift_uses_vy and not shift_vx,
            seed=seed if seed is not None else env_config.seed,
        )

        emu = Emulator(config)
        emu.load_rom_file(rom_file)
        if trace:
            emu.cpu.on_instruction = _trace

        if verbose:
            click.echo(f"ROM: {rom_file} ({len(emu.rom)} bytes)", err=True)
            click.echo(
                f"Running {frames} frames at {config.instructions_per_frame} "
                f"instructions/frame",
                err=True,
            )

        held = set(keys)
        for _ in range(frames):
            emu.run_frame(held)

        click.echo(emu.display_text)

        if registers:
            regs = emu.registers
            click.echo(" ".join(f"V{i:X}={regs[f'V{i:X}']:02X}" for i in range(16)))
            click.echo(
                f"I={regs['I']:03X} PC={regs['PC']:03X} SP={regs['SP']} "
                f"DT={regs['DT']} ST={regs['ST']}"
            )

        if png is not None:
            png.write_bytes(emu.render_display(scale))
            if verbose:
                click.echo(f"Saved {png}", err=True)

        if verbose:
            click.echo(
                f"Executed {emu.instruction_count} instructions in "
                f"{emu.frame_count} frames"
                + (" (waiting for key)" if emu.is_waiting_for_key else ""),
                err=True,
            )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Runtime")


if __name__ == "__main__":
    main()
