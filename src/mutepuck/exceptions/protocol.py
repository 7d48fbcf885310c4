"""Protocol and event exceptions.

- ProtocolInvariantViolation: an encode path produced a forbidden report
- MalformedEventError: an event or input report could not be interpreted
- AudioSessionError: the audio session manager could not be reached
"""

from .base import MutePuckError


class ProtocolInvariantViolation(MutePuckError):
    """
    An encoded output report would trigger a hardware side effect.

    This indicates a logic defect, not an environmental condition, so it is
    never recoverable. The offending report is never written.
    """

    def __init__(self, report: bytes, reason: str):
        super().__init__(
            user_message="Refusing to send an unsafe report to the mute device",
            technical_message=f"Protocol invariant violated ({reason}): {report.hex()}",
            recoverable=False,
            recovery_hint="This is a bug in mutepuck. Please report it with the log file.",
        )
        self.report = report
        self.reason = reason


class MalformedEventError(MutePuckError):
    """An input report or session event could not be interpreted."""

    def __init__(self, source: str, detail: str):
        super().__init__(
            user_message=f"Ignoring malformed {source} event",
            technical_message=f"Malformed {source} event: {detail}",
            recoverable=True,
        )
        self.source = source
        self.detail = detail


class AudioSessionError(MutePuckError):
    """Audio session manager is not reachable."""

    def __init__(self, original_error: str | None = None):
        tech_msg = "Could not connect to the audio session manager"
        if original_error:
            tech_msg += f": {original_error}"

        super().__init__(
            user_message="Could not connect to the audio server.",
            technical_message=tech_msg,
            recoverable=True,
            recovery_hint=(
                "Make sure PipeWire (with pipewire-pulse) or PulseAudio is running "
                "for this user. Try 'pactl info'."
            ),
        )
        self.original_error = original_error
