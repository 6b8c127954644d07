"""MCP tool registrations.

A tool is an async handler plus the pydantic model its arguments are
validated against. Modules under ``memorybank.mcp.tools`` register their
handlers on the shared ``registry`` at import time; the server reads it
back when wiring FastMCP.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from memorybank.mcp.context import AppContext

HandlerFn = Callable[["AppContext", Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    handler: HandlerFn
    description: str
    params_model: type[BaseModel]


class ToolRegistry:
    """Tools keyed by name, kept in registration order.

    Registering a name twice replaces the earlier handler, so reloading a
    tools module is harmless.
    """

    def __init__(self) -> None:
        self._specs: dict[str, ToolSpec] = {}

    def register(
        self,
        name: str,
        description: str | None,
        params_model: type[BaseModel],
    ) -> Callable[[HandlerFn], HandlerFn]:
        """Decorator recording ``fn`` as the handler for tool ``name``.

        ``description`` falls back to the first paragraph of the handler's
        docstring when omitted.
        """

        def decorator(fn: HandlerFn) -> HandlerFn:
            text = description or (inspect.getdoc(fn) or "").split("\n\n")[0].strip()
            self._specs[name] = ToolSpec(name, fn, text, params_model)
            return fn

        return decorator

    def get(self, name: str) -> ToolSpec | None:
        return self._specs.get(name)

    def get_all(self) -> list[ToolSpec]:
        return list(self)

    def names(self) -> list[str]:
        return list(self._specs)

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs


registry = ToolRegistry()
