"""
chip8run CLI Tests
==================

Tests for the headless ROM runner.
"""

import pytest


def write_rom(tmp_path, *words: int):
    data = bytearray()
    for word in words:
        data += bytes([(word >> 8) & 0xFF, word & 0xFF])
    path = tmp_path / "test.ch8"
    path.write_bytes(bytes(data))
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CHIP8_IPF", "CHIP8_SEED", "CHIP8_SHIFT_VY"):
        monkeypatch.delenv(name, raising=False)


class TestChip8RunCLI:
    """Tests for the chip8run CLI tool."""

    def test_cli_help(self):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Run a CHIP-8 ROM headlessly" in result.output

    def test_cli_version(self):
        from click.testing import CliRunner
        from chip8_vm import __version__
        from chip8_vm.cli.chip8run import main

        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_cli_prints_screen(self, tmp_path):
        """Draw the '0' glyph and print the final screen."""
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = write_rom(tmp_path, 0x6000, 0xF029, 0xD005, 0x1206)

        runner = CliRunner()
        result = runner.invoke(main, [str(rom), "--frames", "1"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("####.")
        assert lines[1].startswith("#..#.")
        assert len(lines) == 32

    def test_cli_registers(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = write_rom(tmp_path, 0x6005, 0x7003, 0xA123, 0x1206)

        runner = CliRunner()
        result = runner.invoke(main, [str(rom), "--frames", "1", "--registers"])

        assert result.exit_code == 0
        assert "V0=08" in result.output
        assert "I=123 PC=206 SP=0" in result.output

    def test_cli_held_key(self, tmp_path):
        """A held key satisfies FX0A."""
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = write_rom(tmp_path, 0xF30A, 0x1202)

        runner = CliRunner()
        result = runner.invoke(
            main, [str(rom), "--frames", "1", "--key", "v", "--registers"]
        )

        assert result.exit_code == 0
        assert "V3=0F" in result.output

    def test_cli_unknown_key(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = write_rom(tmp_path, 0x1200)

        runner = CliRunner()
        result = runner.invoke(main, [str(rom), "--key", "P"])

        assert result.exit_code == 2
        assert "Unknown key" in result.output

    def test_cli_ipf_option(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = write_rom(tmp_path, 0x7001, 0x1200)

        runner = CliRunner()
        result = runner.invoke(
            main, [str(rom), "--frames", "2", "--ipf", "4", "--registers"]
        )

        assert result.exit_code == 0
        # 8 steps alternate ADD and JP
        assert "V0=04" in result.output

    def test_cli_ipf_from_env(self, tmp_path, monkeypatch):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        monkeypatch.setenv("CHIP8_IPF", "2")
        rom = write_rom(tmp_path, 0x7001, 0x1200)

        runner = CliRunner()
        result = runner.invoke(main, [str(rom), "--frames", "3", "--registers"])

        assert result.exit_code == 0
        assert "V0=03" in result.output

    def test_cli_shift_vx(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = write_rom(tmp_path, 0x6004, 0x61FF, 0x8016, 0x1206)

        runner = CliRunner()
        result = runner.invoke(
            main, [str(rom), "--frames", "1", "--shift-vx", "--registers"]
        )

        assert result.exit_code == 0
        assert "V0=02" in result.output

    def test_cli_png(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = write_rom(tmp_path, 0x1200)
        png = tmp_path / "screen.png"

        runner = CliRunner()
        result = runner.invoke(
            main, [str(rom), "--frames", "1", "--png", str(png), "--scale", "2"]
        )

        assert result.exit_code == 0
        assert png.read_bytes()[:4] == b"\x89PNG"

    def test_cli_machine_error(self, tmp_path):
        """A machine defect exits with code 1 and names the fault."""
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = write_rom(tmp_path, 0x00EE)

        runner = CliRunner()
        result = runner.invoke(main, [str(rom)])

        assert result.exit_code == 1
        assert "Runtime error: Return with empty call stack" in result.output

    def test_cli_rom_too_large(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        rom = tmp_path / "big.ch8"
        rom.write_bytes(bytes(4000))

        runner = CliRunner()
        result = runner.invoke(main, [str(rom)])

        assert result.exit_code == 1
        assert "3584" in result.output

    def test_cli_missing_file(self, tmp_path):
        from click.testing import CliRunner
        from chip8_vm.cli.chip8run import main

        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "missing.ch8")])

        assert result.exit_code == 2
