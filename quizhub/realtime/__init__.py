"""Real-time notifier: connection manager and transports"""

from quizhub.realtime.manager import ConnectionManager, get_notifier

__all__ = ["ConnectionManager", "get_notifier"]
