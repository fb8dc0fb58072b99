"""
Client-side notifier subscription

Keeps a local view of question counts in step with ``question_count_updated``
events. Events are best effort, so ``refresh()`` refetches everything after a
reconnect or whenever the caller suspects it missed something.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional

from quizhub.client.api import ApiError, QuizHubClient

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

QUESTION_COUNT_UPDATED = "question_count_updated"


class QuestionCountCache:
    """Question set id -> question count"""

    def __init__(self):
        self.counts: Dict[str, int] = {}

    def get(self, question_set_id: str) -> Optional[int]:
        return self.counts.get(question_set_id)

    def apply(self, data: Dict[str, Any]) -> None:
        self.counts[data["questionSetId"]] = data["count"]

    def replace(self, question_sets: Iterable[Dict[str, Any]]) -> None:
        self.counts = {qs["id"]: qs["questionCount"] for qs in question_sets}

    def __len__(self) -> int:
        return len(self.counts)


class NotifierSubscription:
    """Polling subscription that dispatches notifier events to handlers"""

    def __init__(self, client: QuizHubClient, cache: Optional[QuestionCountCache] = None):
        self.client = client
        self.cache = cache or QuestionCountCache()
        self.sid: Optional[str] = None
        self.user_id: Optional[str] = None
        self.handlers: Dict[str, List[Handler]] = defaultdict(list)
        self.on(QUESTION_COUNT_UPDATED, self.cache.apply)

    def on(self, event: str, handler: Handler) -> None:
        self.handlers[event].append(handler)

    def connect(self) -> str:
        """Open a session, authenticate when the client holds a token, and resync"""
        handshake = self.client.open_polling()
        self.sid = handshake["sid"]
        if self.client.token:
            self.user_id = self.client.authenticate_polling(self.sid)["userId"]
        self.refresh()
        logger.debug(f"Subscribed as session {self.sid}")
        return self.sid

    def refresh(self) -> None:
        """Full refetch of the catalog counts"""
        self.cache.replace(self.client.all_question_sets())

    def dispatch(self, events: Iterable[Dict[str, Any]]) -> int:
        handled = 0
        for message in events:
            for handler in self.handlers.get(message.get("event"), []):
                handler(message.get("data") or {})
                handled += 1
        return handled

    def poll_once(self, timeout: float = 0) -> int:
        """Fetch and dispatch pending events; reconnects if the session expired"""
        if self.sid is None:
            self.connect()
        try:
            events = self.client.poll(self.sid, timeout)
        except ApiError as e:
            if e.status_code != 404:
                raise
            logger.info(f"Notifier session {self.sid} expired, reconnecting")
            self.connect()
            return 0
        return self.dispatch(events)

    def close(self) -> None:
        if self.sid is None:
            return
        try:
            self.client.close_polling(self.sid)
        except ApiError as e:
            logger.debug(f"Closing session {self.sid} failed: {e}")
        self.sid = None
