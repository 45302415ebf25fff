"""Textual integration for trackr. Opt-in — requires textual.

Widgets are the typical subscriber: a render function reads reactive state
and writes it into the widget tree. The bridge keeps those re-runs away
from an app that cannot take them (not running, or paused while widgets
are being swapped), drops NoMatches raised by queries for widgets that
are gone, and hops to the UI thread when state changed elsewhere.

Pause state lives in this module, keyed by id(app), never on the app.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from trackr.reaction import autorun as _autorun, reaction as _reaction

logger = logging.getLogger("trackr.textual")

_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded re-runs for app during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, fn):
    """Wrap fn so it only reaches the widget tree when that is safe."""
    ui_thread = threading.get_ident()

    def _render(*args):
        try:
            fn(*args)
        except NoMatches:
            logger.debug("Widget gone during render of %r", fn)

    def _guarded(*args):
        if not is_safe(app):
            return
        if threading.get_ident() != ui_thread:
            app.call_from_thread(_render, *args)
        else:
            _render(*args)

    return _guarded


def autorun(app, fn):
    """autorun() whose runs are guarded for app.

    A skipped run reads nothing, but dependencies captured by earlier runs
    stay registered.
    """
    return _autorun(_guard(app, fn))


def reaction(app, data_fn, effect_fn, *, fire_immediately=False):
    """reaction() whose effect is guarded for app. data_fn always tracks."""
    return _reaction(data_fn, _guard(app, effect_fn), fire_immediately=fire_immediately)
