import logging
import threading
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from photostrip.camera import FrameCapturer, Photo, VideoSource
from photostrip.config import BoothConfig
from photostrip.errors import CaptureFailed, PhotostripError, SourceNotReady
from photostrip.fsm import SessionFSM, SessionPhase
from photostrip.pipeline.buffer import PhotoBuffer
from photostrip.pipeline.composer import CompositionDescriptor, StripComposer, normalize_color
from photostrip.pipeline.layouts import LayoutCatalog, LayoutPreset
from photostrip.pipeline.renderer import StripRenderer
from photostrip.timer import ThreadingTimerService, TimerHandle, TimerService


@dataclass
class Session:
    """Mutable state of one strip. Owned by the SessionController."""
    session_id: int
    layout: LayoutPreset
    buffer: PhotoBuffer
    countdown: Optional[int] = None
    poses_taken: int = 0
    next_ordinal: int = 0


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session handed to subscribers."""
    phase: SessionPhase
    countdown: Optional[int]
    layout_id: str
    pose_count: int
    photos: Tuple[Photo, ...]
    decoration_color: str
    composition_ready: bool
    error: Optional[PhotostripError] = None


Listener = Callable[[SessionSnapshot], None]


class SessionController:
    """
    Orchestrates a photo strip session:
    - Controls the session FSM
    - Runs the countdown tick and the cooldown between poses
    - Captures mirrored stills into the photo buffer
    - Composes and exports the finished strip
    - Notifies subscribers on every state change

    Timer callbacks are bound to the session id current when they were
    scheduled and are dropped once that session has been replaced. All
    mutation happens under one re-entrant lock.
    """

    def __init__(
        self,
        video_source: VideoSource,
        timers: TimerService = None,
        catalog: LayoutCatalog = None,
        capturer: FrameCapturer = None,
        composer: StripComposer = None,
        renderer: StripRenderer = None,
        config: BoothConfig = None,
    ):
        self.log = logging.getLogger("SessionController")
        self.config = config or BoothConfig()

        # --- Collaborators ---
        self.video_source = video_source
        self.timers = timers or ThreadingTimerService()
        if catalog is None:
            catalog = (
                LayoutCatalog.from_yaml(self.config.layouts_file)
                if self.config.layouts_file
                else LayoutCatalog()
            )
        self.catalog = catalog
        self.capturer = capturer or FrameCapturer()
        self.composer = composer or StripComposer(caption_title=self.config.caption_title)
        self.renderer = renderer or StripRenderer()

        # --- State ---
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._tick_handle: Optional[TimerHandle] = None
        self._cooldown_handle: Optional[TimerHandle] = None
        self._session_counter = 0
        self._last_error: Optional[PhotostripError] = None
        self._decoration_color = normalize_color(self.config.default_color)
        self.session = self._new_session(self.catalog.resolve(self.config.default_layout))

        # --- FSM ---
        self.fsm = SessionFSM(callbacks=self._fsm_callbacks())

    # ----------------------------------------------------------------------
    # FSM CALLBACKS
    # ----------------------------------------------------------------------

    def _fsm_callbacks(self):
        return {
            "on_enter_idle": self._on_enter_idle,
            "on_enter_counting": self._on_enter_counting,
            "on_enter_capturing": self._on_enter_capturing,
            "on_enter_cooldown": self._on_enter_cooldown,
            "on_enter_complete": self._on_enter_complete,
        }

    def _on_enter_idle(self):
        error, self._last_error = self._last_error, None
        self._notify(error)

    def _on_enter_counting(self):
        session = self.session
        session.countdown = self.config.countdown_seconds
        pose = session.poses_taken + 1
        self.log.info(
            f"Pose {pose}/{session.layout.pose_count}: counting down from {session.countdown}"
        )
        token = session.session_id
        self._tick_handle = self.timers.call_every(
            self.config.tick_interval, lambda: self._on_tick(token)
        )
        self._notify()

    def _on_enter_capturing(self):
        session = self.session
        session.countdown = None
        self._notify()

        try:
            photo = self.capturer.capture(self.video_source, ordinal=session.next_ordinal)
        except (SourceNotReady, CaptureFailed) as e:
            self._abort(e)
            return
        except Exception as e:
            self._abort(CaptureFailed(f"Capture raised {type(e).__name__}: {e}"))
            return

        session.next_ordinal += 1
        session.buffer.append(photo)
        session.poses_taken += 1
        self.log.info(
            f"Captured pose {session.poses_taken}/{session.layout.pose_count} "
            f"(photo #{photo.ordinal})"
        )
        self.fsm.capture_done()

    def _on_enter_cooldown(self):
        token = self.session.session_id
        self._cooldown_handle = self.timers.call_later(
            self.config.cooldown, lambda: self._on_cooldown_elapsed(token)
        )
        self._notify()

    def _on_enter_complete(self):
        self.log.info(
            f"Session {self.session.session_id} complete: "
            f"{len(self.session.buffer)} photos for layout {self.session.layout.id}"
        )
        self._notify()

    # ----------------------------------------------------------------------
    # TIMER CALLBACKS
    # ----------------------------------------------------------------------

    def _on_tick(self, token: int):
        with self._lock:
            if token != self.session.session_id or self.fsm.state != SessionPhase.COUNTING.value:
                self.log.debug(f"Dropping stale tick for session {token}")
                return

            self.session.countdown -= 1
            self._notify()
            if self.session.countdown > 0:
                return

            self._cancel_handle("_tick_handle")
            self.fsm.countdown_done()

    def _on_cooldown_elapsed(self, token: int):
        with self._lock:
            if token != self.session.session_id or self.fsm.state != SessionPhase.COOLDOWN.value:
                self.log.debug(f"Dropping stale cooldown for session {token}")
                return

            self._cooldown_handle = None
            if self.session.poses_taken >= self.session.layout.pose_count:
                self.fsm.finish()
            else:
                self.fsm.next_pose()

    # ----------------------------------------------------------------------
    # INTERNALS
    # ----------------------------------------------------------------------

    def _new_session(self, layout: LayoutPreset) -> Session:
        self._session_counter += 1
        self.log.debug(f"New session {self._session_counter} for layout {layout.id}")
        return Session(
            session_id=self._session_counter,
            layout=layout,
            buffer=PhotoBuffer(layout.pose_count),
        )

    def _cancel_handle(self, attr: str):
        handle = getattr(self, attr)
        if handle is not None:
            handle.cancel()
            setattr(self, attr, None)

    def _cancel_timers(self):
        self._cancel_handle("_tick_handle")
        self._cancel_handle("_cooldown_handle")

    def _restart(self, layout: LayoutPreset):
        """Cancel any loop, replace the session and return to idle."""
        self._cancel_timers()
        self.session = self._new_session(layout)
        self.fsm.reset()

    def _abort(self, error: PhotostripError):
        self.log.error(f"Session {self.session.session_id} aborted: {error}")
        self._cancel_timers()
        self.session = self._new_session(self.session.layout)
        self._last_error = error
        self.fsm.fail()

    def _snapshot(self, error: Optional[PhotostripError] = None) -> SessionSnapshot:
        session = self.session
        phase = self.fsm.phase
        return SessionSnapshot(
            phase=phase,
            countdown=session.countdown if phase is SessionPhase.COUNTING else None,
            layout_id=session.layout.id,
            pose_count=session.layout.pose_count,
            photos=session.buffer.photos,
            decoration_color=self._decoration_color,
            composition_ready=session.buffer.is_complete(),
            error=error,
        )

    def _notify(self, error: Optional[PhotostripError] = None):
        snapshot = self._snapshot(error)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                self.log.error(f"Session listener {listener!r} failed: {e}", exc_info=True)

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state-change listener. Returns a function that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def select_layout(self, layout_id: str) -> LayoutPreset:
        """Switch layout. Cancels any running session and empties the buffer."""
        layout = self.catalog.resolve(layout_id)
        with self._lock:
            previous = self.fsm.state
            self._restart(layout)
            self.log.info(f"Layout {layout.id} selected ({layout.pose_count} poses), was {previous}")
        return layout

    def start_session(self):
        """Start a fresh countdown/capture loop for the active layout."""
        with self._lock:
            self._restart(self.session.layout)
            self.log.info(
                f"Starting session {self.session.session_id} "
                f"(layout {self.session.layout.id}, {self.session.layout.pose_count} poses)"
            )
            self.fsm.start()

    def reset_session(self):
        with self._lock:
            self._restart(self.session.layout)
            self.log.info("Session reset")

    def capture_manual(self) -> Photo:
        """
        Capture one photo immediately, outside the countdown loop.

        The phase is left untouched and the photo does not count as a session
        pose. Capture errors propagate with the buffer unchanged.
        """
        with self._lock:
            session = self.session
            photo = self.capturer.capture(self.video_source, ordinal=session.next_ordinal)
            session.next_ordinal += 1
            session.buffer.append(photo)
            self.log.info(f"Manual capture #{photo.ordinal} ({len(session.buffer)}/{session.buffer.capacity})")
            self._notify()
            return photo

    def set_decoration_color(self, color: str):
        normalized = normalize_color(color)
        with self._lock:
            self._decoration_color = normalized
            self._notify()

    def compose(self, on: Optional[date] = None) -> CompositionDescriptor:
        with self._lock:
            return self.composer.compose(
                self.session.buffer, self.session.layout, self._decoration_color, on=on
            )

    def export_strip(self, output_dir=None, on: Optional[date] = None) -> Optional[Path]:
        """Compose the strip and hand it to the renderer. Returns the written path."""
        descriptor = self.compose(on=on)
        path = self.renderer.export(descriptor, output_dir or self.config.output_dir)
        if path is None:
            self.log.warning(f"Strip export failed for layout {descriptor.layout_id}")
        return path

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot()

    def close(self):
        """Stop pending timers; the controller stays usable afterwards."""
        with self._lock:
            self._cancel_timers()

    @property
    def phase(self) -> SessionPhase:
        with self._lock:
            return self.fsm.phase

    @property
    def countdown(self) -> Optional[int]:
        return self.snapshot().countdown

    @property
    def photos(self) -> Tuple[Photo, ...]:
        with self._lock:
            return self.session.buffer.photos

    @property
    def layout(self) -> LayoutPreset:
        with self._lock:
            return self.session.layout

    @property
    def decoration_color(self) -> str:
        with self._lock:
            return self._decoration_color

    @property
    def is_composition_ready(self) -> bool:
        with self._lock:
            return self.session.buffer.is_complete()
