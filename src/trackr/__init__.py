"""trackr: automatic dependency tracking for mutable record and sequence graphs."""

from importlib.metadata import version as _version

__version__ = _version("trackr")

from trackr._tracking import Subscriber, active_subscriber, tracking, untracked
from trackr.config import (
    is_observing,
    is_server_rendering,
    observation_paused,
    set_server_rendering,
    toggle_observing,
)
from trackr.containers import (
    Kind,
    Property,
    ReactiveDict,
    ReactiveList,
    is_raw,
    kind_of,
    mark_raw,
    to_raw,
)
from trackr.dep import Dep
from trackr.observer import (
    Observer,
    define_reactive,
    delete,
    observe,
    observer_of,
    reactive,
    set,
)
from trackr.reaction import Reaction, autorun, reaction
# textual NOT auto-imported — opt-in only

__all__ = [
    "Dep",
    "Kind",
    "Observer",
    "Property",
    "Reaction",
    "ReactiveDict",
    "ReactiveList",
    "Subscriber",
    "active_subscriber",
    "autorun",
    "define_reactive",
    "delete",
    "is_observing",
    "is_raw",
    "is_server_rendering",
    "kind_of",
    "mark_raw",
    "observation_paused",
    "observe",
    "observer_of",
    "reaction",
    "reactive",
    "set",
    "set_server_rendering",
    "to_raw",
    "toggle_observing",
    "tracking",
    "untracked",
]
