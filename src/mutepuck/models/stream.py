"""Capture stream model."""

from pydantic import BaseModel, ConfigDict, Field

# Session-assigned identifier; PulseAudio source-output indexes are ints
StreamId = int


class CaptureStream(BaseModel):
    """An active audio capture stream and its mute flag.

    Instances are immutable; the stream registry replaces an entry when
    the session reports a new mute flag.
    """

    model_config = ConfigDict(frozen=True)

    stream_id: StreamId = Field(description="Opaque id assigned by the audio session")
    muted: bool = Field(default=False, description="Whether the stream is muted")
    application: str | None = Field(
        default=None, description="Owning application name (informational)"
    )
