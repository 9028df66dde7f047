# posture_coach/posture_engine/camera/camera_manager.py
import cv2
import logging
import threading
import time
import numpy as np
from typing import Optional, Tuple
from ..common.models import FrameMetadata

logger = logging.getLogger(__name__)

class CameraManager:
    """Grabs webcam frames on a background thread and keeps only the newest one."""

    def __init__(self, config: dict):
        self._source = config.get('source', 0)
        self._resolution = tuple(config.get('resolution', (640, 480)))
        self._target_fps = config.get('target_fps', 30)
        self._mirror = config.get('mirror', False)
        self._cap = cv2.VideoCapture(self._source)
        if not self._cap.isOpened():
            raise IOError(f"Unable to access webcam source: {self._source}")

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._resolution[0])
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._resolution[1])
        self._cap.set(cv2.CAP_PROP_FPS, self._target_fps)

        self._latest: Optional[Tuple[np.ndarray, int, float]] = None
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._update, daemon=True)
        self._running = False
        self._frame_id = 0

    def _update(self):
        while self._running:
            ret, frame = self._cap.read()
            if not ret:
                logger.debug("Frame read failed on source %s.", self._source)
                time.sleep(0.01) # Avoid busy-waiting on error
                continue
            if self._mirror:
                frame = cv2.flip(frame, 1)
            self._frame_id += 1
            with self._lock:
                self._latest = (frame, self._frame_id, time.time() * 1000.0)

    def get_frame(self) -> Tuple[Optional[np.ndarray], Optional[FrameMetadata]]:
        """Returns a copy of the newest frame and its metadata, or (None, None) before the first one."""
        with self._lock:
            if self._latest is None:
                return None, None
            frame, frame_id, timestamp = self._latest

        metadata = FrameMetadata(
            frame_id=frame_id,
            timestamp=timestamp,
            source_resolution=(frame.shape[1], frame.shape[0])
        )
        return frame.copy(), metadata

    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self._running = True
        self._thread.start()
        logger.info("Camera %s started.", self._source)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._running = False
        self._thread.join()
        self._cap.release()
        logger.info("Camera stopped and resources released.")
