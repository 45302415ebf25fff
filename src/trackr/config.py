"""Process-wide switches for the observation engine.

Two things can stop new containers from being observed:

- toggle_observing(False), used by collaborators building objects that
  must stay plain;
- server-only mode, where nothing ever re-renders so tracking is wasted
  work. It defaults to the TRACKR_ENV environment variable being "server".

Neither switch touches containers that are already instrumented.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

ENV_VAR = "TRACKR_ENV"

_observing: bool = True

# None means "ask the environment".
_server_rendering: bool | None = None


def toggle_observing(value: bool) -> None:
    global _observing
    _observing = value


def is_observing() -> bool:
    return _observing


@contextmanager
def observation_paused() -> Iterator[None]:
    """Disable observation inside the block, then restore the previous setting."""
    previous = _observing
    toggle_observing(False)
    try:
        yield
    finally:
        toggle_observing(previous)


def set_server_rendering(value: bool | None) -> None:
    """Force server-only mode on or off. None falls back to TRACKR_ENV."""
    global _server_rendering
    _server_rendering = value


def is_server_rendering() -> bool:
    if _server_rendering is None:
        return os.environ.get(ENV_VAR) == "server"
    return _server_rendering
