"""Tool registry and dispatcher.

Handlers receive the model's arguments as keyword arguments and return
either a data mapping (reported as SUCCESS) or a ready ToolResponse. Any
exception a handler raises is converted into a FAILED response at the call
boundary; dispatch itself never raises for handler faults.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import replace
from typing import Any, Union

from tool_agent.client.base import ToolCall, ToolDescriptor, ToolResponse
from tool_agent.core.errors import ConfigurationError, ToolArgumentError
from tool_agent.core.logging import get_logger

logger = get_logger(__name__)

HandlerResult = Union[Mapping[str, Any], ToolResponse]
ToolHandler = Callable[..., Union[HandlerResult, Awaitable[HandlerResult]]]


class ToolRegistry:
    """Maps tool names to descriptors and handlers.

    Registration happens once, while the agent is built. Afterwards the
    registry is only read.
    """

    def __init__(self) -> None:
        self._descriptors: dict[str, ToolDescriptor] = {}
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, name: str, descriptor: ToolDescriptor, handler: ToolHandler) -> None:
        """Register a tool.

        Args:
            name: Name the model uses to call the tool.
            descriptor: Metadata sent to the model on every request.
            handler: Sync or async callable invoked with the call's arguments.

        Raises:
            ConfigurationError: If the name is taken or does not match the
                descriptor.
        """
        if name in self._handlers:
            raise ConfigurationError(f"tool already registered: {name}")
        if descriptor.name != name:
            raise ConfigurationError(
                f"descriptor name {descriptor.name!r} does not match registration name {name!r}"
            )
        self._descriptors[name] = descriptor
        self._handlers[name] = handler
        logger.debug("tool_registered", tool=name)

    def descriptors(self) -> list[ToolDescriptor]:
        """Descriptors in registration order."""
        return list(self._descriptors.values())

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    async def _invoke(self, tool_call: ToolCall) -> ToolResponse:
        name = tool_call.function_name
        descriptor = self._descriptors[name]

        missing = sorted(param for param in descriptor.required if param not in tool_call.arguments)
        if missing:
            raise ToolArgumentError(name, missing)

        handler = self._handlers[name]
        if inspect.iscoroutinefunction(handler):
            result = await handler(**tool_call.arguments)
        else:
            result = await asyncio.to_thread(handler, **tool_call.arguments)
            if inspect.isawaitable(result):
                result = await result

        if isinstance(result, ToolResponse):
            return replace(result, tool_call_id=tool_call.id)
        return ToolResponse.success(tool_call.id, **dict(result or {}))

    async def dispatch(self, tool_call: ToolCall) -> ToolResponse | None:
        """Invoke the handler for a tool call.

        Args:
            tool_call: The call requested by the model.

        Returns:
            The tool's response, a FAILED response if the handler raised, or
            None if no tool has that name.
        """
        name = tool_call.function_name
        if name not in self._handlers:
            # Unknown names are skipped without a response.
            logger.debug("tool_not_registered", tool=name, tool_call_id=tool_call.id)
            return None

        try:
            response = await self._invoke(tool_call)
        except Exception as e:
            logger.warning(
                "tool_failed",
                tool=name,
                tool_call_id=tool_call.id,
                exception_type=type(e).__name__,
                exception_message=str(e),
            )
            return ToolResponse.failure(tool_call.id, e)

        logger.info("tool_dispatched", tool=name, tool_call_id=tool_call.id, status=response.status)
        return response

