"""Resilience patterns and implementations.

This module contains resilience-related infrastructure components such as
the reconnect manager used by long-lived upstream connections.
"""

from infrastructure.resilience.reconnect import (
    ConnectionState,
    ReconnectManager,
    ReconnectState,
)

__all__ = [
    "ConnectionState",
    "ReconnectManager",
    "ReconnectState",
]
