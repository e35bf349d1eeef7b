# Display - 64x32 monochrome framebuffer. Pixels are either on or off (1 || 0)
# and sprites are XORed onto it, wrapping around the screen edges.

import numpy as np

from .config import width, height


class DisplayBuffer:

    def __init__(self, w=width, h=height):
        self.width = w
        self.height = h
        self.vram = np.zeros((h, w), dtype=np.uint8)

    def clear(self):
        self.vram[:] = 0

    def blit(self, x, y):
        """XOR a lit pixel at (x, y), wrapped into range.

        Returns True if the pixel was on and has been erased.
        """
        x %= self.width
        y %= self.height
        erased = self.vram[y, x] == 1
        self.vram[y, x] ^= 1
        return bool(erased)

    def draw_sprite(self, x, y, rows):
        """XOR an 8-pixel-wide sprite at (x, y), returning the collision flag.

        Wrapping is applied per pixel, so a sprite crossing an edge continues
        on the opposite side of the screen.
        """
        collision = False
        for row, sprite in enumerate(rows):
            if sprite == 0:
                continue
            for bit in range(8):
                if sprite & (0x80 >> bit):
                    collision |= self.blit(x + bit, y + row)
        return collision

    def pixel(self, x, y):
        return int(self.vram[y % self.height, x % self.width])

    def lit_count(self):
        return int(self.vram.sum())

    def snapshot(self):
        """Read-only copy of the framebuffer, indexed [y, x]."""
        frame = self.vram.copy()
        frame.setflags(write=False)
        return frame

    def to_rgba(self, scale=1, on=(255, 255, 255, 255), off=(0, 0, 0, 255), flip=True):
        """Render the framebuffer as raw RGBA bytes, upscaled by `scale`.

        pyglet images have their origin at the bottom-left, so rows are
        flipped by default.
        """
        if scale < 1:
            raise ValueError("scale must be a positive integer")
        palette = np.array([off, on], dtype=np.uint8)
        frame = palette[self.vram]
        if flip:
            frame = frame[::-1]
        if scale != 1:
            frame = np.repeat(np.repeat(frame, scale, axis=0), scale, axis=1)
        return np.ascontiguousarray(frame).tobytes()

