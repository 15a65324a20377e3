"""
Background Render Worker

Runs renders on a daemon thread with supersede-not-queue semantics:
each submit() bumps a generation counter and replaces any pending
request. A render in flight polls the counter between bands and gives up
as soon as a newer request arrives, so the last submitted parameters are
always the ones that end up on screen. Only complete buffers of the
current generation are published.
"""

import logging
import threading

from .params import RenderCancelled, coerce_params
from .renderer import Renderer

logger = logging.getLogger(__name__)


class RenderWorker(threading.Thread):
    """Background thread that renders the most recently submitted params."""

    def __init__(self, renderer=None, texture_seed=None):
        super().__init__(daemon=True, name="glitch-render")
        self.renderer = renderer if renderer is not None else Renderer()
        self.texture_seed = texture_seed
        self._cond = threading.Condition()
        self._pending = None          # (generation, params) or None
        self._generation = 0
        self._published_generation = 0
        self._latest_frame = None     # (H, W, 4) uint8, read-only
        self._latest_params = None
        self._failure = None          # (generation, exception) of the last failed render
        self._running = True
        self.renders_completed = 0
        self.renders_abandoned = 0

    @property
    def generation(self):
        with self._cond:
            return self._generation

    def submit(self, params):
        """Queue params for rendering, replacing anything not yet rendered.

        Params are validated here so bad input fails in the caller's thread.

        Returns:
            The generation number of this request
        """
        params = coerce_params(params)
        with self._cond:
            self._generation += 1
            self._pending = (self._generation, params)
            self._cond.notify_all()
            return self._generation

    def _is_stale(self, generation):
        return not self._running or self._generation != generation

    def run(self):
        logger.info("Render worker started")
        while True:
            with self._cond:
                while self._running and self._pending is None:
                    self._cond.wait()
                if not self._running:
                    break
                generation, params = self._pending
                self._pending = None

            try:
                frame = self.renderer.render(
                    params,
                    texture_seed=self.texture_seed,
                    cancelled=lambda: self._is_stale(generation),
                )
            except RenderCancelled:
                self.renders_abandoned += 1
                logger.debug("Render %d superseded", generation)
                continue
            except Exception as e:
                logger.exception("Render %d failed", generation)
                with self._cond:
                    self._failure = (generation, e)
                    self._cond.notify_all()
                continue

            with self._cond:
                if generation == self._generation:
                    self._latest_frame = frame
                    self._latest_params = params
                    self._published_generation = generation
                    self.renders_completed += 1
                    self._cond.notify_all()
                else:
                    self.renders_abandoned += 1
        logger.info("Render worker stopped")

    def get_latest_frame(self):
        """Return the most recent completed frame or None."""
        with self._cond:
            return self._latest_frame

    def get_latest(self):
        """Return (generation, params, frame) of the last published render."""
        with self._cond:
            return self._published_generation, self._latest_params, self._latest_frame

    def wait_for(self, generation, timeout=None):
        """Block until `generation` (or a newer one) is published.

        Returns:
            The published frame, or None on timeout / shutdown

        Raises:
            The exception of a failed render at or after `generation`
        """
        with self._cond:
            ok = self._cond.wait_for(
                lambda: (self._published_generation >= generation
                         or self._failed_since(generation)
                         or not self._running),
                timeout=timeout,
            )
            if self._published_generation < generation and self._failed_since(generation):
                raise self._failure[1]
            if not ok or self._published_generation < generation:
                return None
            return self._latest_frame

    def _failed_since(self, generation):
        return self._failure is not None and self._failure[0] >= generation

    def stop(self):
        with self._cond:
            self._running = False
            self._cond.notify_all()
