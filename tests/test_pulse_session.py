"""Tests for the PulseAudio session adapter, against a scripted fake server."""

import time
from types import SimpleNamespace

import pulsectl
import pytest

from mutepuck.exceptions import AudioSessionError
from mutepuck.session import PulseAudioSession
from mutepuck.protocols import StreamAdded, StreamMuteChanged, StreamRemoved

from conftest import wait_for


def source_output(index, mute=False, application="Firefox", category=None):
    proplist = {"application.name": application}
    if category is not None:
        proplist["media.category"] = category
    return SimpleNamespace(index=index, mute=int(mute), proplist=proplist)


class FakePulse:
    """Stand-in for a pulsectl.Pulse connection.

    Each call to event_listen() runs the next scripted step (a callable
    taking this connection and returning the events to deliver). Like the
    server, it only reports events once a subscription mask is set; changes
    made before that are lost. ``on_list`` runs inside source_output_list()
    after the reply is built, to change streams while it is in flight.
    """

    def __init__(self, outputs=(), script=(), on_list=None):
        self.outputs = {info.index: info for info in outputs}
        self.script = list(script)
        self.on_list = on_list
        self.mute_calls = []
        self.mask = None
        self.callback = None
        self.closed = False
        self.mute_error = None
        self.queued = []

    def emit(self, event):
        if self.mask is not None:
            self.queued.append(event)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self.closed = True

    def source_output_list(self):
        reply = list(self.outputs.values())
        if self.on_list is not None:
            on_list, self.on_list = self.on_list, None
            on_list(self)
        return reply

    def source_output_info(self, index):
        if index not in self.outputs:
            raise pulsectl.PulseIndexError(index)
        return self.outputs[index]

    def source_output_mute(self, index, mute):
        if self.mute_error is not None:
            raise self.mute_error
        self.mute_calls.append((index, mute))

    def event_mask_set(self, *masks):
        self.mask = masks

    def event_callback_set(self, callback):
        self.callback = callback

    def event_listen(self, timeout=None):
        if self.script:
            for event in self.script.pop(0)(self) or ():
                self.emit(event)
        if not self.queued:
            time.sleep(0.01)
            return
        queued, self.queued = self.queued, []
        for event in queued:
            try:
                self.callback(event)
            except pulsectl.PulseLoopStop:
                pass


def event(kind, index):
    return SimpleNamespace(t=kind, index=index, facility="source_output")


@pytest.fixture
def received():
    return []


def listening(session, received):
    session.subscribe(received.append)
    return session


class TestListener:
    """Test stream events reported by the listener thread."""

    @pytest.mark.integration
    def test_initial_sync(self, received):
        pulse = FakePulse([source_output(4, mute=True), source_output(2, application="Zoom")])
        session = listening(PulseAudioSession(pulse_factory=lambda name: pulse), received)
        try:
            assert wait_for(lambda: len(received) == 2)
            assert received == [
                StreamAdded(2, muted=False, application="Zoom"),
                StreamAdded(4, muted=True, application="Firefox"),
            ]
            assert pulse.mask == ("source_output",)
        finally:
            session.close()

    @pytest.mark.integration
    def test_ignore_filters(self, received):
        pulse = FakePulse(
            [
                source_output(1, application="pavucontrol"),
                source_output(2, category="Manager"),
                source_output(3, application="Discord"),
            ]
        )
        session = PulseAudioSession(
            ignore_applications=["pavucontrol"],
            ignore_media_categories=["Manager"],
            pulse_factory=lambda name: pulse,
        )
        listening(session, received)
        try:
            assert wait_for(lambda: received)
            assert not wait_for(lambda: len(received) > 1, timeout=0.1)
            assert received == [StreamAdded(3, muted=False, application="Discord")]
        finally:
            session.close()

    @pytest.mark.integration
    def test_new_change_remove(self, received):
        def add_stream(pulse):
            pulse.outputs[7] = source_output(7, application="Zoom")
            return [event("new", 7)]

        def mute_stream(pulse):
            pulse.outputs[7] = source_output(7, mute=True, application="Zoom")
            return [event("change", 7)]

        def remove_stream(pulse):
            del pulse.outputs[7]
            return [event("remove", 7)]

        pulse = FakePulse(script=[add_stream, mute_stream, remove_stream])
        session = listening(PulseAudioSession(pulse_factory=lambda name: pulse), received)
        try:
            assert wait_for(lambda: len(received) == 3)
            assert received == [
                StreamAdded(7, muted=False, application="Zoom"),
                StreamMuteChanged(7, muted=True),
                StreamRemoved(7),
            ]
        finally:
            session.close()

    @pytest.mark.integration
    def test_stream_gone_before_lookup(self, received):
        def flash(pulse):
            # Created and destroyed before we could query it
            return [event("new", 9)]

        pulse = FakePulse(script=[flash])
        session = listening(PulseAudioSession(pulse_factory=lambda name: pulse), received)
        try:
            assert wait_for(lambda: not pulse.script)
            assert not wait_for(lambda: received, timeout=0.1)
        finally:
            session.close()

    @pytest.mark.integration
    def test_stream_removed_during_initial_listing(self, received):
        def remove_stream(pulse):
            del pulse.outputs[7]
            pulse.emit(event("remove", 7))

        pulse = FakePulse([source_output(7)], on_list=remove_stream)
        session = listening(PulseAudioSession(pulse_factory=lambda name: pulse), received)
        try:
            assert wait_for(lambda: len(received) == 2)
            assert received == [
                StreamAdded(7, muted=False, application="Firefox"),
                StreamRemoved(7),
            ]
        finally:
            session.close()

    @pytest.mark.integration
    def test_stream_added_during_initial_listing(self, received):
        def add_stream(pulse):
            pulse.outputs[8] = source_output(8, mute=True, application="Zoom")
            pulse.emit(event("new", 8))

        pulse = FakePulse([source_output(7)], on_list=add_stream)
        session = listening(PulseAudioSession(pulse_factory=lambda name: pulse), received)
        try:
            assert wait_for(lambda: len(received) == 2)
            assert received == [
                StreamAdded(7, muted=False, application="Firefox"),
                StreamAdded(8, muted=True, application="Zoom"),
            ]
        finally:
            session.close()

    @pytest.mark.integration
    def test_reconnect_forgets_and_resyncs(self, received):
        def drop_connection(pulse):
            raise pulsectl.PulseError("connection reset")

        first = FakePulse([source_output(1)], script=[drop_connection])
        second = FakePulse([source_output(1, mute=True)])
        connections = iter([first, second])

        session = PulseAudioSession(reconnect_delay=0.01, pulse_factory=lambda name: next(connections))
        listening(session, received)
        try:
            assert wait_for(lambda: len(received) == 3)
            assert received == [
                StreamAdded(1, muted=False, application="Firefox"),
                StreamRemoved(1),
                StreamAdded(1, muted=True, application="Firefox"),
            ]
        finally:
            session.close()


class TestCommands:
    """Test set_mute and list_streams."""

    @pytest.mark.unit
    def test_set_mute(self):
        pulse = FakePulse([source_output(3)])
        session = PulseAudioSession(pulse_factory=lambda name: pulse)
        session.set_mute(3, True)
        session.set_mute(3, False)
        assert pulse.mute_calls == [(3, True), (3, False)]

    @pytest.mark.unit
    def test_set_mute_on_vanished_stream(self):
        pulse = FakePulse()
        pulse.mute_error = pulsectl.PulseIndexError(3)
        session = PulseAudioSession(pulse_factory=lambda name: pulse)
        session.set_mute(3, True)
        assert pulse.closed is False

    @pytest.mark.unit
    def test_set_mute_error_drops_connection(self):
        pulses = [FakePulse(), FakePulse()]
        pulses[0].mute_error = pulsectl.PulseOperationFailed(3)
        connections = iter(pulses)
        session = PulseAudioSession(pulse_factory=lambda name: next(connections))

        session.set_mute(3, True)
        assert pulses[0].closed

        # Next command reconnects
        session.set_mute(3, True)
        assert pulses[1].mute_calls == [(3, True)]

    @pytest.mark.unit
    def test_list_streams(self):
        pulse = FakePulse([source_output(1, mute=True), source_output(2, application="pavucontrol")])
        session = PulseAudioSession(ignore_applications=["pavucontrol"], pulse_factory=lambda name: pulse)

        streams = session.list_streams()
        assert [(s.stream_id, s.muted, s.application) for s in streams] == [(1, True, "Firefox")]

    @pytest.mark.unit
    def test_list_streams_without_server(self):
        def refuse(name):
            raise pulsectl.PulseError("Failed to connect to pulseaudio server")

        session = PulseAudioSession(pulse_factory=refuse)
        with pytest.raises(AudioSessionError) as exc_info:
            session.list_streams()
        assert "Failed to connect" in exc_info.value.technical_message

    @pytest.mark.unit
    def test_close_without_subscribe(self):
        PulseAudioSession(pulse_factory=lambda name: FakePulse()).close()
