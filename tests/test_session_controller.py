"""
Tests for DetectionSessionController.

All collaborators are in-memory fakes; the supersession tests use real
worker threads gated by events.
"""

import io
import threading

import pytest
import requests
from PIL import Image
from requests.adapters import BaseAdapter

from core.errors import CaptureError, DetectionError, LocationFailure
from core.models import CapturedImage, Coordinate, ErrorKind, ProcessedImage
from core.session_controller import DetectionSessionController
from core.session_states import (
    Capturing,
    Failed,
    Idle,
    Locating,
    Ready,
    Uploading,
)
from providers.interfaces.map import LaunchResult
from providers.services.detection_client import DetectionClient

COORD = Coordinate(37.421999, -122.084)

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


def _image(tag: str) -> CapturedImage:
    return CapturedImage(data=tag.encode(), content_type="image/jpeg", filename=f"{tag}.jpg")


class _FakeCapture:
    def __init__(self, results):
        self._results = list(results)
        self.calls = 0

    def capture_image(self):
        self.calls += 1
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class _FakeLocation:
    def __init__(self, results=None):
        self._results = list(results or [])
        self.calls = 0

    def get_current_coordinate(self):
        self.calls += 1
        result = self._results.pop(0) if self._results else COORD
        if isinstance(result, Exception):
            raise result
        return result


class _FakeClient:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def submit(self, image, coord):
        self.calls.append((image, coord))
        if self.error is not None:
            raise self.error
        return ProcessedImage(data=image.data + b"-processed", content_type="image/png")


class _GatedClient:
    """Blocks each submit() until its gate is released."""

    def __init__(self):
        self.gates: list[threading.Event] = []
        self.entered = threading.Semaphore(0)
        self.threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def submit(self, image, coord):
        gate = threading.Event()
        with self._lock:
            self.gates.append(gate)
            self.threads.append(threading.current_thread())
        self.entered.release()
        assert gate.wait(5.0), "gate never released"
        return ProcessedImage(data=image.data + b"-processed")


class _GatedCapture:
    """Holds each capture_image() until its gate is released, then returns the scripted result."""

    def __init__(self, results):
        self._results = list(results)
        self.gates: list[threading.Event] = []
        self.entered = threading.Semaphore(0)
        self.threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def capture_image(self):
        gate = threading.Event()
        with self._lock:
            result = self._results.pop(0)
            self.gates.append(gate)
            self.threads.append(threading.current_thread())
        self.entered.release()
        assert gate.wait(5.0), "gate never released"
        return result


class _GatedLocation:
    def __init__(self):
        self.gates: list[threading.Event] = []
        self.entered = threading.Semaphore(0)
        self.threads: list[threading.Thread] = []

    def get_current_coordinate(self):
        gate = threading.Event()
        self.gates.append(gate)
        self.threads.append(threading.current_thread())
        self.entered.release()
        assert gate.wait(5.0), "gate never released"
        return COORD


def _controller(capture, location=None, client=None, map_launcher=None):
    controller = DetectionSessionController(
        capture_provider=capture,
        location_provider=location or _FakeLocation(),
        detection_client=client or _FakeClient(),
        map_launcher=map_launcher,
    )
    history = []
    controller.subscribe(history.append)
    return controller, history


# ---------------------------------------------------------------------------
# Happy path and failures
# ---------------------------------------------------------------------------


def test_initial_state_is_idle():
    controller, _ = _controller(_FakeCapture([]))
    assert isinstance(controller.state, Idle)
    assert controller.generation == 0


def test_successful_cycle_reaches_ready():
    client = _FakeClient()
    controller, history = _controller(_FakeCapture([_image("one")]), client=client)

    generation = controller.start_capture(block=True)

    assert [type(s) for s in history] == [Capturing, Locating, Uploading, Ready]
    assert all(s.generation == generation for s in history)
    state = controller.state
    assert isinstance(state, Ready)
    assert state.processed_image.data == b"one-processed"
    assert state.coordinate == COORD
    assert client.calls == [(_image("one"), COORD)]


def test_uploading_state_retains_coordinate():
    controller, history = _controller(_FakeCapture([_image("one")]))
    controller.start_capture(block=True)

    uploading = [s for s in history if isinstance(s, Uploading)][0]
    assert uploading.coordinate == COORD


def test_cancelled_capture_returns_to_idle_without_side_effects():
    location = _FakeLocation()
    client = _FakeClient()
    controller, history = _controller(_FakeCapture([None]), location, client)

    controller.start_capture(block=True)

    assert isinstance(controller.state, Idle)
    assert [type(s) for s in history] == [Capturing, Idle]
    assert location.calls == 0
    assert client.calls == []


def test_capture_error_fails_session():
    controller, _ = _controller(_FakeCapture([CaptureError(detail="no camera")]))

    controller.start_capture(block=True)

    state = controller.state
    assert isinstance(state, Failed)
    assert state.error_kind == ErrorKind.CAPTURE_FAILED


@pytest.mark.parametrize(
    "kind",
    [
        ErrorKind.SERVICE_DISABLED,
        ErrorKind.PERMISSION_DENIED,
        ErrorKind.PERMISSION_PERMANENTLY_DENIED,
        ErrorKind.POSITION_UNAVAILABLE,
    ],
)
def test_location_failure_maps_to_failed_kind(kind):
    client = _FakeClient()
    controller, history = _controller(
        _FakeCapture([_image("one")]), _FakeLocation([LocationFailure(kind)]), client
    )

    controller.start_capture(block=True)

    state = controller.state
    assert isinstance(state, Failed)
    assert state.error_kind == kind
    assert state.coordinate is None
    assert client.calls == []
    assert not any(isinstance(s, (Uploading, Ready)) for s in history)


@pytest.mark.parametrize(
    "error",
    [
        DetectionError(ErrorKind.NETWORK_ERROR),
        DetectionError(ErrorKind.MALFORMED_RESPONSE),
        DetectionError(ErrorKind.SERVER_ERROR, status_code=503),
    ],
)
def test_upload_failure_maps_to_failed_kind(error):
    controller, _ = _controller(_FakeCapture([_image("one")]), client=_FakeClient(error))

    controller.start_capture(block=True)

    state = controller.state
    assert isinstance(state, Failed)
    assert state.error_kind == error.kind
    assert state.status_code == error.status_code


def test_unexpected_collaborator_exception_does_not_escape():
    controller, _ = _controller(
        _FakeCapture([_image("one")]), client=_FakeClient(RuntimeError("boom"))
    )

    controller.start_capture(block=True)

    state = controller.state
    assert isinstance(state, Failed)
    assert state.error_kind == ErrorKind.UNEXPECTED


def test_every_failure_has_distinct_message():
    messages = {
        Failed(error_kind=kind).message
        for kind in ErrorKind
        if kind != ErrorKind.CAPTURE_CANCELLED
    }
    assert len(messages) == len(ErrorKind) - 1


def test_failed_is_not_retried_automatically():
    location = _FakeLocation([LocationFailure(ErrorKind.POSITION_UNAVAILABLE)])
    controller, _ = _controller(_FakeCapture([_image("one")]), location)

    controller.start_capture(block=True)

    assert isinstance(controller.state, Failed)
    assert location.calls == 1


def test_failed_then_fresh_capture_has_no_residual_data():
    location = _FakeLocation([LocationFailure(ErrorKind.SERVICE_DISABLED), COORD])
    controller, history = _controller(
        _FakeCapture([_image("first"), _image("second")]), location
    )

    first = controller.start_capture(block=True)
    assert isinstance(controller.state, Failed)
    assert controller.state.error_kind == ErrorKind.SERVICE_DISABLED

    history.clear()
    second = controller.start_capture(block=True)

    assert second == first + 1
    assert [type(s) for s in history] == [Capturing, Locating, Uploading, Ready]
    assert all(s.generation == second for s in history)
    assert not hasattr(history[0], "error_kind")
    assert controller.state.processed_image.data == b"second-processed"


def test_listener_error_does_not_break_cycle():
    controller, _ = _controller(_FakeCapture([_image("one")]))

    def _broken(state):
        raise ValueError("render failed")

    controller.subscribe(_broken)
    controller.start_capture(block=True)

    assert isinstance(controller.state, Ready)


def test_listeners_run_without_holding_the_state_lock():
    controller, _ = _controller(_FakeCapture([_image("one")]))
    observed = []

    def _read_from_other_thread(state):
        seen = []
        reader = threading.Thread(target=lambda: seen.append(controller.state))
        reader.start()
        reader.join(2.0)
        observed.append((state.name, reader.is_alive(), seen))

    controller.subscribe(_read_from_other_thread)
    controller.start_capture(block=True)

    assert [name for name, _, _ in observed] == ["capturing", "locating", "uploading", "ready"]
    assert all(not blocked for _, blocked, _ in observed)
    assert all(len(seen) == 1 for _, _, seen in observed)


def test_unsubscribe_stops_notifications():
    controller, _ = _controller(_FakeCapture([_image("one")]))
    seen = []
    unsubscribe = controller.subscribe(seen.append)
    unsubscribe()

    controller.start_capture(block=True)

    assert seen == []


# ---------------------------------------------------------------------------
# Mocked HTTP server through the real DetectionClient
# ---------------------------------------------------------------------------


def _png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (3, 3), (0, 0, 255)).save(buf, format="PNG")
    return buf.getvalue()


class _StaticServer(BaseAdapter):
    def __init__(self, status, body):
        super().__init__()
        self.status = status
        self.body = body

    def send(self, request, **kwargs):
        response = requests.Response()
        response.status_code = self.status
        response._content = self.body
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


def _http_client(status, body) -> DetectionClient:
    session = requests.Session()
    session.mount("http://", _StaticServer(status, body))
    return DetectionClient("http://detector.local", session=session)


def test_mocked_200_server_bytes_reach_ready_state():
    body = _png_bytes()
    controller, _ = _controller(
        _FakeCapture([_image("one")]), client=_http_client(200, body)
    )

    controller.start_capture(block=True)

    assert isinstance(controller.state, Ready)
    assert controller.state.processed_image.data == body


@pytest.mark.parametrize("status", [400, 403, 404, 409, 422, 500, 502, 504])
def test_mocked_non_2xx_status_is_preserved(status):
    controller, _ = _controller(
        _FakeCapture([_image("one")]), client=_http_client(status, b"error")
    )

    controller.start_capture(block=True)

    state = controller.state
    assert isinstance(state, Failed)
    assert state.error_kind == ErrorKind.SERVER_ERROR
    assert state.status_code == status


# ---------------------------------------------------------------------------
# Supersession
# ---------------------------------------------------------------------------


def test_late_upload_result_of_superseded_session_is_discarded():
    client = _GatedClient()
    controller, history = _controller(
        _FakeCapture([_image("first"), _image("second")]), client=client
    )

    first = controller.start_capture()
    assert client.entered.acquire(timeout=5.0)
    second = controller.start_capture()
    assert client.entered.acquire(timeout=5.0)

    # Newer session finishes first.
    client.gates[1].set()
    client.threads[1].join(5.0)
    assert isinstance(controller.state, Ready)
    assert controller.state.processed_image.data == b"second-processed"

    # Stale response arrives afterwards.
    client.gates[0].set()
    client.threads[0].join(5.0)

    state = controller.state
    assert isinstance(state, Ready)
    assert state.generation == second
    assert state.processed_image.data == b"second-processed"
    assert not any(
        isinstance(s, Ready) and s.generation == first for s in history
    )


def test_superseded_session_does_not_upload_after_locating():
    location = _GatedLocation()
    client = _FakeClient()
    controller, _ = _controller(
        _FakeCapture([_image("first"), _image("second")]), location, client
    )

    controller.start_capture()
    assert location.entered.acquire(timeout=5.0)
    controller.start_capture()
    assert location.entered.acquire(timeout=5.0)

    location.gates[0].set()
    location.threads[0].join(5.0)
    location.gates[1].set()
    assert controller.wait(5.0)

    # Only the newer session reached the network.
    assert [image.filename for image, _ in client.calls] == ["second.jpg"]
    assert controller.state.processed_image.data == b"second-processed"


@pytest.mark.parametrize(
    "stale_result", [None, _image("first")], ids=["cancelled", "image"]
)
def test_capture_result_of_superseded_session_is_discarded(stale_result):
    capture = _GatedCapture([stale_result, _image("second")])
    location = _FakeLocation()
    client = _FakeClient()
    controller, history = _controller(capture, location, client)

    controller.start_capture()
    assert capture.entered.acquire(timeout=5.0)
    second = controller.start_capture()
    assert capture.entered.acquire(timeout=5.0)

    # Older capture returns while the newer one is still open.
    capture.gates[0].set()
    capture.threads[0].join(5.0)

    state = controller.state
    assert isinstance(state, Capturing)
    assert state.generation == second
    assert location.calls == 0

    capture.gates[1].set()
    assert controller.wait(5.0)

    assert isinstance(controller.state, Ready)
    assert controller.state.generation == second
    assert location.calls == 1
    assert [image.filename for image, _ in client.calls] == ["second.jpg"]
    assert not any(isinstance(s, Idle) for s in history)


def test_wait_without_cycle_returns_true():
    controller, _ = _controller(_FakeCapture([]))
    assert controller.wait(0.1) is True


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------


class _RecordingLauncher:
    def __init__(self):
        self.opened = []

    def open(self, coord):
        self.opened.append(coord)
        return LaunchResult.success(f"geo:{coord.latitude},{coord.longitude}")


def test_open_map_in_ready_uses_session_coordinate():
    launcher = _RecordingLauncher()
    controller, _ = _controller(_FakeCapture([_image("one")]), map_launcher=launcher)
    controller.start_capture(block=True)

    result = controller.open_map()

    assert result.ok
    assert launcher.opened == [COORD]


def test_open_map_in_idle_is_invalid_usage():
    launcher = _RecordingLauncher()
    controller, _ = _controller(_FakeCapture([]), map_launcher=launcher)

    result = controller.open_map()

    assert not result.ok
    assert result.invalid_usage
    assert result.error_kind == ErrorKind.LAUNCH_FAILURE
    assert launcher.opened == []


def test_open_map_in_failed_is_invalid_usage():
    launcher = _RecordingLauncher()
    controller, _ = _controller(
        _FakeCapture([_image("one")]),
        _FakeLocation([LocationFailure(ErrorKind.PERMISSION_DENIED)]),
        map_launcher=launcher,
    )
    controller.start_capture(block=True)

    result = controller.open_map()

    assert result.invalid_usage
    assert launcher.opened == []
    assert isinstance(controller.state, Failed)


def test_failed_map_launch_keeps_ready_state():
    class _BrokenLauncher:
        def open(self, coord):
            return LaunchResult.failure("no browser")

    controller, _ = _controller(
        _FakeCapture([_image("one")]), map_launcher=_BrokenLauncher()
    )
    controller.start_capture(block=True)

    result = controller.open_map()

    assert not result.ok
    assert not result.invalid_usage
    assert isinstance(controller.state, Ready)
