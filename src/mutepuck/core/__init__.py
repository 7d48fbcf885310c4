"""Core indicator logic: registry, state engine and dispatcher."""

from .dispatcher import EventDispatcher
from .engine import MuteStateEngine, reduce_state, toggle_target
from .registry import StreamRegistry

__all__ = [
    "EventDispatcher",
    "MuteStateEngine",
    "StreamRegistry",
    "reduce_state",
    "toggle_target",
]
