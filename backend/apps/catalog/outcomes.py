"""Values returned by orchestrator operations.

Views turn them into Django responses; flashes are pushed to the message
storage before the response is built.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class FlashMessage:
    level: str
    message: str


@dataclass
class RenderOutcome:
    template: str
    context: Dict[str, Any] = field(default_factory=dict)
    flashes: List[FlashMessage] = field(default_factory=list)
    status: int = 200


@dataclass
class RedirectOutcome:
    """Redirect to a named route, or to ``url`` when it is set."""

    route: Optional[str] = None
    kwargs: Dict[str, Any] = field(default_factory=dict)
    flashes: List[FlashMessage] = field(default_factory=list)
    url: Optional[str] = None
    query: Dict[str, Any] = field(default_factory=dict)


@dataclass
class JsonOutcome:
    payload: Any
    status: int = 200


@dataclass
class FileOutcome:
    path: str
    filename: str


@dataclass
class NotFoundOutcome:
    message: str = ""
