"""
Pygame Preview Window for Glitch Contour

Shows the latest completed render from a RenderWorker, scaled to the
window. Parameter editing lives in the host application; this window only
presents and exports what was rendered.

Controls:
  S           Save PNG (glitch-contour.png in the screenshots folder)
  R           Re-render (fresh grain when texture mode is on)
  Q / ESC     Quit
"""

import os
import time
import numpy as np
import pygame

from .export import save_png
from .params import coerce_params, format_hex_color
from .worker import RenderWorker


class Viewer:

    def __init__(self, params, width=800, height=800, renderer=None):
        self.params = coerce_params(params)
        self.canvas_w = width
        self.canvas_h = height
        self.running = True
        self.worker = RenderWorker(renderer)
        self._surface = None
        self._surface_frame = None

    def _screenshots_dir(self):
        path = os.path.join(
            os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
            "screenshots"
        )
        os.makedirs(path, exist_ok=True)
        return path

    def _save_screenshot(self):
        frame = self.worker.get_latest_frame()
        if frame is None:
            print("Nothing rendered yet")
            return
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        path = os.path.join(self._screenshots_dir(), f"glitch-contour_{timestamp}.png")
        save_png(frame, path)
        print(f"Screenshot saved: {path}")

    def _frame_surface(self):
        """Convert the latest frame to a scaled surface (cached per frame)."""
        frame = self.worker.get_latest_frame()
        if frame is None:
            return None
        if frame is not self._surface_frame:
            rgb = np.ascontiguousarray(frame[:, :, :3].swapaxes(0, 1))
            surface = pygame.surfarray.make_surface(rgb)
            self._surface = pygame.transform.smoothscale(
                surface, (self.canvas_w, self.canvas_h))
            self._surface_frame = frame
        return self._surface

    def run(self):
        """Main viewer loop."""
        pygame.init()
        screen = pygame.display.set_mode((self.canvas_w, self.canvas_h), pygame.RESIZABLE)
        pygame.display.set_caption(
            f"Glitch Contour - {self.params.pattern_type.value} "
            f"{format_hex_color(self.params.color1)} / {format_hex_color(self.params.color2)}")
        clock = pygame.time.Clock()

        self.worker.start()
        self.worker.submit(self.params)

        try:
            while self.running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.running = False
                    elif event.type == pygame.VIDEORESIZE:
                        self.canvas_w, self.canvas_h = event.w, event.h
                        self._surface_frame = None
                    elif event.type == pygame.KEYDOWN:
                        self._handle_keydown(event)

                screen.fill((0, 0, 0))
                surface = self._frame_surface()
                if surface is not None:
                    screen.blit(surface, (0, 0))
                pygame.display.flip()
                clock.tick(30)
        finally:
            self.worker.stop()
            pygame.quit()

    def _handle_keydown(self, event):
        key = event.key

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_s:
            self._save_screenshot()

        elif key == pygame.K_r:
            self.worker.submit(self.params)
