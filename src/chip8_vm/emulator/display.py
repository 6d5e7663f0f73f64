"""
Framebuffer for CHIP-8 VM
=========================

The CHIP-8 screen is 64 x 32 monochrome pixels. Sprites are drawn by
XOR-ing rows of 8 pixels into the framebuffer; a pixel that goes from set
to unset is a collision.

Framebuffer layout:
    index = x + y * 64, one byte per pixel holding 0 or 1

Drawing rules:
    - The sprite origin wraps: (x mod 64, y mod 32)
    - Pixels that would land past the right or bottom edge are clipped,
      not wrapped
    - Collision is accumulated over the whole sprite (any pixel erased)
"""

import io
from dataclasses import dataclass
from typing import List


WIDTH = 64
HEIGHT = 32


@dataclass
class DisplayState:
    """Framebuffer bookkeeping that is not pixel data."""
    needs_refresh: bool = True  # Content changed since last framebuffer() read
    draw_count: int = 0  # Sprites drawn since reset


class Display:
    """
    64x32 monochrome framebuffer with XOR sprite drawing.

    Example:
        >>> display = Display()
        >>> display.draw_sprite(0, 0, bytes([0xF0]))
        False
        >>> display.get_pixel(3, 0)
        1
        >>> display.draw_sprite(0, 0, bytes([0xF0]))
        True
    """

    WIDTH = WIDTH
    HEIGHT = HEIGHT

    def __init__(self):
        self._pixels = bytearray(WIDTH * HEIGHT)
        self._state = DisplayState()

    @property
    def needs_refresh(self) -> bool:
        """True if the framebuffer changed since it was last read."""
        return self._state.needs_refresh

    @property
    def draw_count(self) -> int:
        """Number of sprites drawn since the last reset."""
        return self._state.draw_count

    def reset(self) -> None:
        """Clear the screen and bookkeeping."""
        self.clear()
        self._state.draw_count = 0

    def clear(self) -> None:
        """Turn every pixel off (00E0)."""
        self._pixels[:] = bytes(WIDTH * HEIGHT)
        self._state.needs_refresh = True

    def get_pixel(self, x: int, y: int) -> int:
        """Pixel value (0 or 1) at screen coordinates."""
        if not (0 <= x < WIDTH and 0 <= y < HEIGHT):
            raise ValueError(f"Pixel ({x}, {y}) outside {WIDTH}x{HEIGHT} screen")
        return self._pixels[x + y * WIDTH]

    def draw_sprite(self, x: int, y: int, rows: bytes) -> bool:
        """
        XOR a sprite into the framebuffer.

        Args:
            x: Column of the sprite origin (wrapped mod 64)
            y: Row of the sprite origin (wrapped mod 32)
            rows: Sprite bytes, one per row, MSB is the leftmost pixel

        Returns:
            True if any set pixel was cleared by the draw
        """
        origin_x = x % WIDTH
        origin_y = y % HEIGHT
        collision = False

        for row_idx, row_data in enumerate(rows):
            py = origin_y + row_idx
            if py >= HEIGHT:
                break

            for bit_idx in range(8):
                if not row_data & (0x80 >> bit_idx):
                    continue
                px = origin_x + bit_idx
                if px >= WIDTH:
                    break

                index = px + py * WIDTH
                if self._pixels[index]:
                    collision = True
                self._pixels[index] ^= 1

        self._state.draw_count += 1
        self._state.needs_refresh = True
        return collision

    # =========================================================================
    # Host API
    # =========================================================================

    def framebuffer(self) -> bytes:
        """
        Snapshot of all 2048 pixels (0 or 1), row-major.

        Reading the framebuffer clears the needs_refresh flag.
        """
        self._state.needs_refresh = False
        return bytes(self._pixels)

    def get_text_grid(self, on: str = "#", off: str = ".") -> List[str]:
        """Render the screen as 32 strings of 64 characters."""
        lines = []
        for y in range(HEIGHT):
            row = self._pixels[y * WIDTH:(y + 1) * WIDTH]
            lines.append("".join(on if p else off for p in row))
        return lines

    def get_text(self, on: str = "#", off: str = ".") -> str:
        """Render the screen as newline-separated text."""
        return "\n".join(self.get_text_grid(on, off))

    def render_image(self, scale: int = 4) -> bytes:
        """
        Render the framebuffer as a PNG image.

        Args:
            scale: Size of each CHIP-8 pixel in image pixels

        Returns:
            PNG image bytes
        """
        from PIL import Image

        if scale < 1:
            raise ValueError(f"scale must be >= 1, got {scale}")

        img = Image.new("L", (WIDTH, HEIGHT))
        img.putdata([255 if p else 0 for p in self._pixels])
        if scale != 1:
            img = img.resize((WIDTH * scale, HEIGHT * scale), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
