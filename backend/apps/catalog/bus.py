from __future__ import annotations

from typing import Any, Dict, Optional, Type

from apps.common import get_logger
from .exceptions import HandlerNotFoundError

logger = get_logger(__name__).bind(component="catalog", layer="bus")


class MessageBus:
    """Dispatch a message to the single handler registered for its type.

    Handlers expose ``handle(message)``; whatever they return or raise is
    passed through unchanged.
    """

    kind = "message"

    def __init__(self, handlers: Optional[Dict[Type, Any]] = None):
        self._handlers: Dict[Type, Any] = dict(handlers or {})
        self.logger = logger.bind(bus=self.kind)

    def register(self, message_type: Type, handler: Any) -> None:
        self._handlers[message_type] = handler

    def handle(self, message: Any) -> Any:
        handler = self._handlers.get(type(message))
        if handler is None:
            self.logger.error(
                "No handler registered", message_type=type(message).__name__
            )
            raise HandlerNotFoundError(
                f"No {self.kind} handler registered for {type(message).__name__}"
            )
        self.logger.debug(
            "Dispatching",
            message_type=type(message).__name__,
            handler=type(handler).__name__,
        )
        return handler.handle(message)


class CommandBus(MessageBus):
    kind = "command"


class QueryBus(MessageBus):
    kind = "query"
