"""Audio session adapters."""

from .protocols import AudioSession, SessionCallback
from .pulse import PulseAudioSession

__all__ = [
    "AudioSession",
    "PulseAudioSession",
    "SessionCallback",
]
