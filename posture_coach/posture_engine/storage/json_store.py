# posture_coach/posture_engine/storage/json_store.py
import json
import logging
import os
import time
from pydantic import ValidationError
from typing import Any, List, Optional
from ..common.constants import SESSION_RETENTION_DAYS
from ..common.models import CalibrationBaseline, SessionRecord, UserSettings

logger = logging.getLogger(__name__)

CALIBRATION_KEY = "calibration"
SETTINGS_KEY = "settings"
SESSIONS_KEY = "sessions"
ALL_KEYS = (CALIBRATION_KEY, SETTINGS_KEY, SESSIONS_KEY)

DAY_MS = 24 * 60 * 60 * 1000

class JsonStore:
    """
    Key-value JSON persistence, one file per key under `directory`.

    Any read or write failure is logged and treated as an absent value so the
    engine keeps running on its in-memory defaults.
    """

    def __init__(self, config: Optional[dict] = None):
        config = config or {}
        self.directory = os.path.expanduser(config.get('directory', '~/.posture_coach'))
        self.retention_days = config.get('session_retention_days', SESSION_RETENTION_DAYS)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Any:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read '%s' from store: %s", key, e)
            return None

    def set(self, key: str, value: Any) -> bool:
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(self._path(key), 'w') as f:
                json.dump(value, f)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write '%s' to store: %s", key, e)
            return False

    def remove(self, key: str):
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove '%s' from store: %s", key, e)

    def clear_all(self):
        for key in ALL_KEYS:
            self.remove(key)

    # --- Typed accessors ---

    def get_calibration(self) -> Optional[CalibrationBaseline]:
        data = self.get(CALIBRATION_KEY)
        if data is None:
            return None
        try:
            baseline = CalibrationBaseline.model_validate(data)
        except ValidationError as e:
            logger.warning("Ignoring malformed calibration in store: %s", e)
            return None
        return baseline if baseline.valid else None

    def set_calibration(self, baseline: CalibrationBaseline) -> bool:
        return self.set(CALIBRATION_KEY, baseline.model_dump(mode='json'))

    def clear_calibration(self):
        self.remove(CALIBRATION_KEY)

    def get_settings(self) -> Optional[UserSettings]:
        data = self.get(SETTINGS_KEY)
        if data is None:
            return None
        try:
            return UserSettings.model_validate(data)
        except ValidationError as e:
            logger.warning("Ignoring malformed settings in store: %s", e)
            return None

    def set_settings(self, settings: UserSettings) -> bool:
        return self.set(SETTINGS_KEY, settings.model_dump(mode='json'))

    def get_sessions(self) -> List[SessionRecord]:
        data = self.get(SESSIONS_KEY)
        if not isinstance(data, list):
            return []
        sessions = []
        for item in data:
            try:
                sessions.append(SessionRecord.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed session record: %s", e)
        return sessions

    def add_session(self, session: SessionRecord, now: Optional[float] = None) -> bool:
        """Appends a session and drops every session that started over the retention window ago."""
        now = time.time() * 1000.0 if now is None else now
        cutoff = now - self.retention_days * DAY_MS
        sessions = [s for s in self.get_sessions() + [session] if s.start_time > cutoff]
        return self.set(SESSIONS_KEY, [s.model_dump(mode='json') for s in sessions])
