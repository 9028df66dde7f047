# posture_coach/main.py
import cv2
import logging
import os
import time
import yaml
import numpy as np
from collections import deque

from posture_engine.camera.camera_manager import CameraManager
from posture_engine.common.enums import LogLevel
from posture_engine.common.errors import PoseProviderInitError
from posture_engine.engine.posture_engine import PostureEngine
from posture_engine.providers.mediapipe_provider import MediaPipePoseProvider
from posture_engine.storage.json_store import JsonStore
from posture_engine.visualization.visualizer import Visualizer

logger = logging.getLogger("posture_coach")

WINDOW_NAME = 'Posture Coach'

def configure_logging(config: dict):
    level = LogLevel(config.get('level', LogLevel.INFO.value).upper())
    logging.basicConfig(
        level=getattr(logging, level.value),
        format=config.get('format', "%(asctime)s %(levelname)s [%(name)s] %(message)s"),
    )

def load_config(path: str) -> dict:
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}

def save_session(store: JsonStore, session) -> bool:
    """Persists a finished session; sessions that never produced a score are dropped."""
    if session is None or not session.scores:
        return False
    return store.add_session(session)

def main():
    """
    The posture coach application loop.
    Keys: c = calibrate, x = cancel calibration, m = start/stop monitoring, q = quit.
    """
    script_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = os.environ.get('POSTURE_COACH_CONFIG', os.path.join(script_dir, 'config.yaml'))

    try:
        config = load_config(config_path)
    except FileNotFoundError:
        print(f"ERROR: Configuration file '{config_path}' not found.")
        return
    except yaml.YAMLError as e:
        print(f"ERROR: Failed to parse configuration file '{config_path}'. {e}")
        return

    configure_logging(config.get('logging', {}))

    store = JsonStore(config.get('storage', {}))
    settings = store.get_settings()
    provider = MediaPipePoseProvider(config.get('pose', {}))
    engine = PostureEngine(provider, config.get('engine', {}), settings=settings)
    engine.set_baseline(store.get_calibration())

    latest = {'score': None, 'alert': None, 'pose': None}
    engine.subscribe_score(lambda score: latest.__setitem__('score', score))
    engine.subscribe_alert(lambda alert: latest.__setitem__('alert', alert))
    engine.subscribe_calibration(store.set_calibration)

    visualization_config = dict(config.get('visualization', {}), dark_mode=engine.settings.dark_mode)
    visualizer = Visualizer(visualization_config)
    fps_history = deque(maxlen=100)

    try:
        engine.initialize()
        with CameraManager(config.get('camera', {})) as camera:
            if config.get('engine', {}).get('autostart', False):
                engine.start_monitoring()

            while camera.is_running():
                frame_start_time = time.perf_counter()

                frame, metadata = camera.get_frame()
                if frame is None:
                    time.sleep(0.001) # Wait briefly if no frame is available
                    continue

                # --- Core Processing Pipeline ---
                result = engine.step(frame, metadata.timestamp)
                if result is not None and result.pose is not None:
                    latest['pose'] = result.pose

                # --- FPS Calculation ---
                latency = time.perf_counter() - frame_start_time
                fps_history.append(1.0 / latency if latency > 0 else 0)
                avg_fps = np.mean(fps_history)

                # --- Visualization ---
                output_frame = visualizer.render(
                    frame, latest['pose'], latest['score'], latest['alert'], metadata.timestamp, avg_fps,
                    calibration_phase=engine.calibration_phase,
                    countdown=engine.countdown_remaining,
                    monitoring=engine.is_monitoring,
                )
                cv2.imshow(WINDOW_NAME, output_frame)

                key = cv2.waitKey(1) & 0xFF
                if key == ord('q'):
                    logger.info("Shutdown signal received.")
                    break
                elif key == ord('c'):
                    engine.start_calibration()
                elif key == ord('x'):
                    engine.cancel_calibration()
                elif key == ord('m'):
                    if engine.is_monitoring:
                        save_session(store, engine.stop_monitoring())
                        latest['score'] = None
                    else:
                        engine.start_monitoring()

    except PoseProviderInitError as e:
        logger.error("Monitoring cannot start: %s", e)
    except IOError as e:
        logger.error("Failed to initialize. %s", e)
    finally:
        save_session(store, engine.stop_monitoring())
        engine.dispose()
        cv2.destroyAllWindows()
        logger.info("Application terminated.")

if __name__ == "__main__":
    main()
