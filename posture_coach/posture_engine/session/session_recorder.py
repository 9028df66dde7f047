# posture_coach/posture_engine/session/session_recorder.py
from datetime import datetime
from typing import List, Optional
from ..common.models import PostureScore, SessionRecord
from ..processing.posture_scorer import round_half_up

class SessionRecorder:
    """Collects the scores of one monitoring session and summarizes them."""

    def __init__(self):
        self.start_time: Optional[float] = None
        self.scores: List[PostureScore] = []

    @property
    def recording(self) -> bool:
        return self.start_time is not None

    def begin(self, now: float):
        self.start_time = now
        self.scores = []

    def record(self, score: PostureScore):
        if self.recording:
            self.scores.append(score)

    def finish(self, now: float) -> Optional[SessionRecord]:
        if not self.recording:
            return None
        overalls = [s.overall for s in self.scores]
        average = round_half_up(sum(overalls) / len(overalls)) if overalls else 0
        record = SessionRecord(
            date=datetime.fromtimestamp(self.start_time / 1000.0).date().isoformat(),
            start_time=self.start_time,
            end_time=now,
            scores=self.scores,
            average_score=average,
            duration=now - self.start_time,
        )
        self.start_time = None
        self.scores = []
        return record
