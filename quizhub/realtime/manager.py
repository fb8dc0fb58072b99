"""
Real-time notifier

Holds the live client connections and pushes events to them. A connection is
either a WebSocket or a polling session whose events wait in a bounded
in-memory queue until the client polls. A polling session can be upgraded to
a WebSocket; its queued events are flushed on the new socket.

Delivery is best effort: a failed send drops the connection and nothing is
kept for clients that are not connected.
"""

import asyncio
import logging
import time
import uuid
from collections import deque
from typing import Any, Dict, List, Optional

from fastapi import Request, WebSocket
from fastapi.encoders import jsonable_encoder

from quizhub.core.exceptions import NotFoundException
from quizhub.core.security import get_user_id_from_token

logger = logging.getLogger(__name__)

QUESTION_COUNT_UPDATED = "question_count_updated"
PROGRESS_UPDATED = "progress_updated"
ACCESS_UPDATED = "access_updated"

POLLING = "polling"
WEBSOCKET = "websocket"


class Connection:
    """One client connection"""

    def __init__(self, transport: str, queue_size: int, websocket: Optional[WebSocket] = None):
        self.sid = uuid.uuid4().hex
        self.transport = transport
        self.websocket = websocket
        self.user_id: Optional[str] = None
        self.queue: deque = deque(maxlen=queue_size)
        self.last_seen = time.monotonic()
        self._pending = asyncio.Event()
        self._send_lock = asyncio.Lock()

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    def enqueue(self, message: Dict[str, Any]) -> None:
        self.queue.append(message)
        self._pending.set()

    def drain(self) -> List[Dict[str, Any]]:
        messages = list(self.queue)
        self.queue.clear()
        self._pending.clear()
        return messages

    async def wait(self, timeout: float) -> None:
        if self.queue or timeout <= 0:
            return
        try:
            await asyncio.wait_for(self._pending.wait(), timeout)
        except asyncio.TimeoutError:
            pass

    async def send(self, message: Dict[str, Any]) -> None:
        async with self._send_lock:
            await self.websocket.send_json(message)


class ConnectionManager:
    """
    Registry of connections keyed by session id, with a per-user index used
    to address events to everyone logged in as that user.
    """

    def __init__(self, ping_interval: int = 25, ping_timeout: int = 60, queue_size: int = 100):
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.queue_size = queue_size
        self.connections: Dict[str, Connection] = {}
        self.user_sessions: Dict[str, set] = {}

    # Connection lifecycle

    def open_polling(self) -> Connection:
        self.prune()
        connection = Connection(POLLING, self.queue_size)
        self.connections[connection.sid] = connection
        logger.debug(f"Polling session opened: {connection.sid}")
        return connection

    def attach_websocket(self, websocket: WebSocket, sid: Optional[str] = None) -> Connection:
        """Register a socket, upgrading the polling session ``sid`` when given"""
        existing = self.connections.get(sid) if sid else None
        if existing is not None and existing.transport == POLLING:
            existing.transport = WEBSOCKET
            existing.websocket = websocket
            existing.touch()
            logger.debug(f"Session {sid} upgraded to websocket")
            return existing

        connection = Connection(WEBSOCKET, self.queue_size, websocket=websocket)
        self.connections[connection.sid] = connection
        return connection

    def get(self, sid: str) -> Connection:
        connection = self.connections.get(sid)
        if connection is None:
            raise NotFoundException("Notifier session")
        connection.touch()
        return connection

    def disconnect(self, sid: str) -> None:
        connection = self.connections.pop(sid, None)
        if connection is None:
            return
        if connection.user_id:
            sessions = self.user_sessions.get(connection.user_id)
            if sessions is not None:
                sessions.discard(sid)
                if not sessions:
                    del self.user_sessions[connection.user_id]
        logger.debug(f"Session closed: {sid}")

    def prune(self) -> None:
        """Drop polling sessions that stopped polling"""
        deadline = time.monotonic() - self.ping_timeout
        stale = [
            sid
            for sid, connection in self.connections.items()
            if connection.transport == POLLING and connection.last_seen < deadline
        ]
        for sid in stale:
            self.disconnect(sid)

    def authenticate(self, sid: str, token: str) -> str:
        """
        Bind a connection to the user a token was issued for.

        Raises:
            AuthenticationException: invalid or expired token
        """
        connection = self.get(sid)
        user_id = get_user_id_from_token(token)
        if connection.user_id and connection.user_id != user_id:
            self.user_sessions.get(connection.user_id, set()).discard(sid)
        connection.user_id = user_id
        self.user_sessions.setdefault(user_id, set()).add(sid)
        logger.info(f"Session {sid} authenticated as user {user_id}")
        return user_id

    # Delivery

    async def flush(self, connection: Connection) -> None:
        """Send events queued while the connection was polling"""
        for message in connection.drain():
            await self._deliver(connection, message)

    async def poll(self, sid: str, timeout: float) -> List[Dict[str, Any]]:
        connection = self.get(sid)
        await connection.wait(timeout)
        connection.touch()
        return connection.drain()

    async def _deliver(self, connection: Connection, message: Dict[str, Any]) -> bool:
        if connection.transport == POLLING:
            connection.enqueue(message)
            return True
        try:
            await connection.send(message)
            return True
        except Exception as e:
            logger.info(f"Dropping session {connection.sid} after failed send: {e}")
            self.disconnect(connection.sid)
            return False

    async def emit(self, event: str, data: Any, user_id: Optional[str] = None) -> int:
        """
        Send an event to one user's connections, or to every connection when
        ``user_id`` is None. Returns the number of connections reached.
        """
        self.prune()
        message = {"event": event, "data": jsonable_encoder(data)}
        if user_id is None:
            targets = list(self.connections.values())
        else:
            targets = [
                self.connections[sid]
                for sid in list(self.user_sessions.get(user_id, ()))
                if sid in self.connections
            ]

        delivered = 0
        for connection in targets:
            if await self._deliver(connection, message):
                delivered += 1
        logger.debug(f"Event {event} delivered to {delivered} connection(s)")
        return delivered

    async def question_count_updated(self, question_set_id: str, count: int) -> int:
        return await self.emit(QUESTION_COUNT_UPDATED, {"questionSetId": question_set_id, "count": count})

    async def progress_updated(self, user_id: str, question_set_id: str, stats: Any) -> int:
        return await self.emit(
            PROGRESS_UPDATED, {"questionSetId": question_set_id, "stats": stats}, user_id=user_id
        )

    async def access_updated(self, user_id: str, access: Any) -> int:
        return await self.emit(ACCESS_UPDATED, access, user_id=user_id)


def get_notifier(request: Request) -> ConnectionManager:
    """Dependency returning the application's notifier"""
    return request.app.state.notifier
