"""Reasoning loop interface.

The LLM call itself lives outside this package.  A reasoning loop takes a
natural-language instruction plus the visible function catalog and either
picks a function to call or answers directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Union

import structlog
from pydantic import BaseModel

from function_gateway.errors import GatewayError
from function_gateway.registry import FunctionRegistry
from function_gateway.schemas.functions import FunctionSchema

logger = structlog.get_logger()


class FunctionChoice(BaseModel):
    """The loop wants ``function_name`` called with ``args``."""

    function_name: str
    args: dict[str, Any] = {}


class FinalAnswer(BaseModel):
    final_answer: str


ChosenAction = Union[FunctionChoice, FinalAnswer]


class StepOutcome(BaseModel):
    """Result of one choose-then-invoke step."""

    action: ChosenAction
    success: bool = True
    result: Any = None
    error: str | None = None
    error_kind: str | None = None
    # The chosen function waits for a human to confirm it; nothing ran.
    needs_confirmation: bool = False


class ReasoningLoop(ABC):
    """Abstract base class for reasoning loops."""

    @abstractmethod
    async def choose_action(self, instruction: str, catalog: list[FunctionSchema]) -> ChosenAction:
        """Pick a function call or produce a final answer."""
        ...


def to_tool_definitions(catalog: list[FunctionSchema]) -> list[dict]:
    """Convert a catalog to OpenAI function calling format."""
    return [schema.to_tool_definition() for schema in catalog]


async def run_instruction(
    instruction: str,
    registry: FunctionRegistry,
    reasoner: ReasoningLoop,
    timeout: float | None = None,
    confirmed: bool = False,
) -> StepOutcome:
    """Ask ``reasoner`` for an action against the visible catalog and run it.

    Gateway errors are reported in the outcome rather than raised, so the
    caller can feed them back to the loop.  A function registered with
    ``needs_confirmation`` only runs when ``confirmed`` is set; otherwise
    the outcome asks for confirmation.
    """
    catalog = registry.list_visible()
    action = await reasoner.choose_action(instruction, catalog)
    if isinstance(action, FinalAnswer):
        return StepOutcome(action=action)

    try:
        entry = registry.resolve(action.function_name)
        if entry.needs_confirmation and not confirmed:
            logger.info("reasoning_step_needs_confirmation", function=action.function_name)
            return StepOutcome(action=action, success=False, needs_confirmation=True)
        result = await registry.call_by_name(action.function_name, action.args, timeout=timeout)
    except GatewayError as e:
        logger.warning(
            "reasoning_step_failed",
            function=action.function_name,
            kind=e.kind,
            error=e.message,
        )
        return StepOutcome(action=action, success=False, error=e.message, error_kind=e.kind)

    logger.info("reasoning_step_complete", function=action.function_name)
    return StepOutcome(action=action, result=result)
