"""
Detection Session Controller.

Orchestrates one capture cycle at a time: capture -> locate -> upload ->
ready. The controller owns the only mutable session state and publishes
every committed transition to its subscribers.

Every cycle gets a generation number. A transition is committed only if
its generation is still the current one, so a cycle superseded by a newer
start_capture() can never overwrite the newer cycle's state.
"""

import threading
from collections.abc import Callable

from core.errors import PotholeSpotterError
from core.models import ErrorKind, describe_error
from core.session_states import (
    Capturing,
    Failed,
    Idle,
    Locating,
    Ready,
    SessionState,
    Uploading,
)
from logging_config import get_logger
from providers.interfaces.capture import CaptureProvider
from providers.interfaces.detection import DetectionClientInterface
from providers.interfaces.location import LocationProviderInterface
from providers.interfaces.map import LaunchResult, MapLauncher

logger = get_logger(__name__)

StateListener = Callable[[SessionState], None]


class DetectionSessionController:
    """
    State machine for capture sessions.

    Key Responsibilities:
    - Runs the capture/locate/upload steps in order, one outstanding step
      at a time.
    - Converts every collaborator failure into a Failed state; nothing
      propagates past the controller.
    - Discards results of superseded cycles.
    - Opens the map only for a Ready session.
    """

    def __init__(
        self,
        capture_provider: CaptureProvider,
        location_provider: LocationProviderInterface,
        detection_client: DetectionClientInterface,
        map_launcher: MapLauncher | None = None,
    ):
        self._capture = capture_provider
        self._location = location_provider
        self._client = detection_client
        self._map_launcher = map_launcher

        # Guards state, generation and listeners. Listeners run outside it.
        self._lock = threading.Lock()
        self._generation = 0
        self._state: SessionState = Idle()
        self._listeners: list[StateListener] = []
        self._worker: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Registers a listener for committed states. Returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _commit(self, generation: int, new_state: SessionState) -> bool:
        """Replaces the state if generation is current. Returns False for stale cycles."""
        with self._lock:
            if generation != self._generation:
                logger.info(
                    f"Discarding stale '{new_state.name}' from session {generation} "
                    f"(current session is {self._generation})"
                )
                return False
            previous = self._state
            self._state = new_state
            listeners = list(self._listeners)

        logger.info(f"Session {generation}: {previous.name} -> {new_state.name}")
        for listener in listeners:
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"State listener failed: {e}", exc_info=True)
        return True

    def _fail(self, generation: int, error: PotholeSpotterError) -> None:
        logger.warning(f"Session {generation} failed: {error.kind.value} ({error})")
        self._commit(
            generation,
            Failed(
                generation=generation,
                error_kind=error.kind,
                status_code=getattr(error, "status_code", None),
                detail=error.detail,
            ),
        )

    # ------------------------------------------------------------------
    # Capture cycle
    # ------------------------------------------------------------------

    def start_capture(self, block: bool = False) -> int:
        """
        Begins a fresh capture cycle, superseding any cycle still running.

        Args:
            block: Run the cycle on the calling thread instead of a worker.

        Returns:
            The generation number of the new cycle.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation

        if not self._commit(generation, Capturing(generation=generation)):
            # Superseded before it started.
            return generation

        if block:
            self._run_cycle(generation)
            return generation

        worker = threading.Thread(
            target=self._run_cycle,
            args=(generation,),
            name=f"DetectionSession-{generation}",
            daemon=True,
        )
        worker.start()
        with self._lock:
            if generation == self._generation:
                self._worker = worker
        return generation

    def wait(self, timeout: float | None = None) -> bool:
        """Waits for the current worker. Returns True if no cycle is running."""
        with self._lock:
            worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def _run_cycle(self, generation: int) -> None:
        try:
            self._run_steps(generation)
        except PotholeSpotterError as e:
            self._fail(generation, e)
        except Exception as e:
            logger.error(f"Unexpected error in session {generation}: {e}", exc_info=True)
            self._commit(
                generation,
                Failed(generation=generation, error_kind=ErrorKind.UNEXPECTED, detail=str(e)),
            )

    def _run_steps(self, generation: int) -> None:
        image = self._capture.capture_image()
        if image is None:
            logger.info(f"Session {generation}: capture cancelled")
            self._commit(generation, Idle(generation=generation))
            return

        if not self._commit(generation, Locating(generation=generation)):
            return
        coord = self._location.get_current_coordinate()

        if not self._commit(
            generation, Uploading(generation=generation, resolved_coordinate=coord)
        ):
            return
        processed = self._client.submit(image, coord)

        self._commit(
            generation,
            Ready(
                generation=generation,
                processed_image=processed,
                resolved_coordinate=coord,
            ),
        )

    # ------------------------------------------------------------------
    # Map
    # ------------------------------------------------------------------

    def open_map(self) -> LaunchResult:
        """Opens the map for the Ready session's coordinate."""
        state = self.state
        if not isinstance(state, Ready) or state.coordinate is None:
            logger.warning(f"Map requested in state '{state.name}'; no coordinate available")
            return LaunchResult.failure(
                describe_error(ErrorKind.LAUNCH_FAILURE), invalid_usage=True
            )
        if self._map_launcher is None:
            return LaunchResult.failure("No map launcher configured")
        return self._map_launcher.open(state.coordinate)
