"""
In-process usage counters, owned by the Slack adapter.
"""
import threading
from collections import Counter

from memebot.logger import logger
from memebot.utils import sanitize_slack_id


class InvocationCounter:
    """
    Thread-safe counters of bot invocations per team and of replies sent or
    dropped because they missed their deadline.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._invocations: Counter[str] = Counter()
        self._replies_sent = 0
        self._replies_suppressed = 0

    def increment_bot_invocations(self, team_id: str) -> None:
        try:
            team_id = sanitize_slack_id(team_id, "team_id")
        except ValueError as e:
            # Don't raise - metrics are non-critical
            logger.warning("Not counting invocation: %s", e)
            return
        with self._lock:
            self._invocations[team_id] += 1

    def get_bot_invocations(self, team_id: str) -> int:
        with self._lock:
            return self._invocations[team_id]

    def record_reply(self, sent: bool) -> None:
        with self._lock:
            if sent:
                self._replies_sent += 1
            else:
                self._replies_suppressed += 1

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "bot_invocations_total": sum(self._invocations.values()),
                "teams": len(self._invocations),
                "replies_sent": self._replies_sent,
                "replies_suppressed": self._replies_suppressed,
            }

    def format_summary(self) -> str:
        return "\n".join(f"{key}: {value}" for key, value in self.snapshot().items())
