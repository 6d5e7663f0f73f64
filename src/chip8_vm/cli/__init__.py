"""
CHIP-8 VM Command-Line Interface
================================

- **chip8run**: headless ROM runner

Each tool is implemented as a Click-based CLI application.
"""

__all__ = ["chip8run"]
