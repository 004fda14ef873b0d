"""Selfie quality gate.

Two modes over one active pixel source:

- live monitoring: a cancellable background sampler analyses one frame every
  ``GateConfig.monitor_interval`` seconds and keeps only the latest metrics;
- capture gating: the captured frame is analysed once and either rejected
  (severity ``error``), accepted with an advisory (``warning``) or accepted
  silently (``ok``).

The sampler and a capture share one analysis lock so the same frame surface
is never read concurrently; a capture also makes the next scheduled sample
skip. Releasing the slot's source stops its monitors.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Protocol

from config import GateConfig, QualityConfig
from models.photo_quality_model import (
    SEVERITY_ERROR,
    PixelFrame,
    QualityFeedback,
    QualityMetrics,
    analyze_frame,
    build_feedback,
)

logger = logging.getLogger("idverify.gate")


class CaptureUnavailableError(RuntimeError):
    """No active source, or the source produced no frame."""


class FrameSource(Protocol):
    def read_frame(self) -> Optional[PixelFrame]:
        ...

    def release(self) -> None:
        ...


# ------------------------------------------------------------- source slot ---

class SourceSlot:
    """Owns the single active pixel source.

    Acquiring a new source releases the previous one under the same lock, so
    two sources are never active at once.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._source: Optional[FrameSource] = None
        self._release_listeners: List[Callable[[], None]] = []

    @property
    def active(self) -> bool:
        with self._lock:
            return self._source is not None

    def add_release_listener(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` after the active source has been released."""
        with self._lock:
            self._release_listeners.append(callback)

    def acquire(self, source: FrameSource) -> FrameSource:
        with self._lock:
            prior = self._source
            self._source = None
            if prior is not None and prior is not source:
                logger.info("releasing previous frame source")
                prior.release()
            self._source = source
        return source

    def release(self, source: Optional[FrameSource] = None) -> None:
        """Release the active source; with ``source`` given, only if it is still active."""
        with self._lock:
            current = self._source
            if current is None or (source is not None and current is not source):
                return
            self._source = None
            current.release()
            listeners = list(self._release_listeners)

        # outside the lock: listeners may join threads blocked on read_frame()
        for callback in listeners:
            callback()

    def read_frame(self) -> Optional[PixelFrame]:
        with self._lock:
            if self._source is None:
                return None
            return self._source.read_frame()

    @contextmanager
    def session(self, source: FrameSource) -> Iterator[FrameSource]:
        self.acquire(source)
        try:
            yield source
        finally:
            self.release(source)


# ----------------------------------------------------------------- monitor ---

class QualityMonitor:
    """Periodic live-quality sampler with synchronous, idempotent ``stop()``."""

    def __init__(
        self,
        slot: SourceSlot,
        interval: Optional[float] = None,
        on_metrics: Optional[Callable[[QualityMetrics], None]] = None,
        quality_cfg: Optional[QualityConfig] = None,
        analysis_lock: Optional[threading.Lock] = None,
    ):
        self.slot = slot
        self.interval = interval if interval is not None else GateConfig().monitor_interval
        self.on_metrics = on_metrics
        self.quality_cfg = quality_cfg or QualityConfig()
        self.analysis_lock = analysis_lock or threading.Lock()

        self._state_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._skip_next = False
        self._latest: Optional[QualityMetrics] = None
        slot.add_release_listener(self.stop)

    @property
    def latest(self) -> Optional[QualityMetrics]:
        return self._latest

    @property
    def running(self) -> bool:
        with self._state_lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """(Re)start sampling; a sampler that is already running is replaced."""
        event = threading.Event()
        thread = threading.Thread(
            target=self._run, args=(event,), name="quality-monitor", daemon=True)
        with self._state_lock:
            old_thread, old_event = self._thread, self._stop_event
            self._thread = thread
            self._stop_event = event
            self._skip_next = False
            self._latest = None
            thread.start()
        self._halt(old_thread, old_event)
        logger.info("live quality monitoring started (every %.1fs)", self.interval)

    def stop(self) -> None:
        with self._state_lock:
            thread, event = self._thread, self._stop_event
            self._thread = None
            self._stop_event = None
        self._halt(thread, event)
        if thread is not None:
            logger.info("live quality monitoring stopped")
        self._latest = None

    @staticmethod
    def _halt(thread: Optional[threading.Thread], event: Optional[threading.Event]) -> None:
        if event is not None:
            event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def suppress_next(self) -> None:
        self._skip_next = True

    def sample_once(self) -> Optional[QualityMetrics]:
        """Analyse the current frame and publish it as the latest result."""
        if self._skip_next:
            self._skip_next = False
            logger.debug("live sample skipped for capture")
            return None

        with self.analysis_lock:
            frame = self.slot.read_frame()
            if frame is None:
                return None
            metrics = analyze_frame(frame, self.quality_cfg)

        self._latest = metrics
        if self.on_metrics is not None:
            self.on_metrics(metrics)
        return metrics

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self.sample_once()
            except Exception:
                logger.exception("live quality check failed")


# ----------------------------------------------------------------- capture ---

@dataclass(frozen=True)
class CaptureDecision:
    accepted: bool
    severity: str
    metrics: QualityMetrics
    feedback: QualityFeedback
    frame: Optional[PixelFrame] = None

    @property
    def advisory(self) -> Optional[str]:
        """Non-blocking warning text for accepted captures."""
        if self.accepted and self.feedback.issues:
            return self.feedback.message
        return None

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "severity": self.severity,
            "metrics": self.metrics.to_dict(),
            "feedback": self.feedback.to_dict(),
        }


@dataclass(frozen=True)
class CaptureAction:
    enabled: bool
    label: str


def gate_capture(frame: PixelFrame, cfg: Optional[QualityConfig] = None) -> CaptureDecision:
    metrics = analyze_frame(frame, cfg)
    feedback = build_feedback(metrics, cfg)
    if feedback.severity == SEVERITY_ERROR:
        logger.info("capture rejected: score=%d %s", metrics.overall_score, feedback.message)
        return CaptureDecision(False, feedback.severity, metrics, feedback)
    if feedback.issues:
        logger.info("capture accepted with advisory: score=%d", metrics.overall_score)
    return CaptureDecision(True, feedback.severity, metrics, feedback, frame=frame)


def capture_action(metrics: Optional[QualityMetrics], cfg: Optional[GateConfig] = None) -> CaptureAction:
    """State of the capture button for the latest live metrics."""
    cfg = cfg or GateConfig()
    if metrics is None:
        return CaptureAction(enabled=True, label=cfg.capture_label)
    if metrics.overall_score < cfg.hard_floor:
        return CaptureAction(enabled=False, label=cfg.override_label)
    if metrics.overall_score < cfg.warning_threshold:
        return CaptureAction(enabled=True, label=cfg.override_label)
    return CaptureAction(enabled=True, label=cfg.capture_label)


class QualityGate:
    """Live monitoring plus capture-time gating over one source slot."""

    def __init__(
        self,
        slot: Optional[SourceSlot] = None,
        gate_cfg: Optional[GateConfig] = None,
        quality_cfg: Optional[QualityConfig] = None,
        on_metrics: Optional[Callable[[QualityMetrics], None]] = None,
    ):
        self.slot = slot or SourceSlot()
        self.gate_cfg = gate_cfg or GateConfig()
        self.quality_cfg = quality_cfg or QualityConfig()
        self.monitor = QualityMonitor(
            self.slot,
            interval=self.gate_cfg.monitor_interval,
            on_metrics=on_metrics,
            quality_cfg=self.quality_cfg,
        )

    def open(self, source: FrameSource) -> None:
        self.slot.acquire(source)
        self.monitor.start()

    def close(self) -> None:
        self.monitor.stop()
        self.slot.release()

    def __enter__(self) -> "QualityGate":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def action(self) -> CaptureAction:
        return capture_action(self.monitor.latest, self.gate_cfg)

    def capture(self) -> CaptureDecision:
        """Grab and gate one frame; an accepted capture closes the source."""
        self.monitor.suppress_next()
        with self.monitor.analysis_lock:
            frame = self.slot.read_frame()
            if frame is None:
                raise CaptureUnavailableError("Video not ready: no frame available from the camera")
            decision = gate_capture(frame, self.quality_cfg)

        if decision.accepted:
            self.close()
        return decision
