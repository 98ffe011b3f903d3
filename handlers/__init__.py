"""
Handlers Module for Who Lies Tonight.

Contains all web layer handlers (Socket.IO and API) with no business logic.
Handlers coordinate between web layer and business logic modules.
"""

from .socket_handlers import register_socket_handlers
from .api_handlers import register_api_handlers
from .broadcaster import SocketIOBroadcaster

__all__ = [
    'register_socket_handlers',
    'register_api_handlers',
    'SocketIOBroadcaster'
]
