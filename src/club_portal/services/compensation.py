"""Best-effort compensating actions for multi-step writes.

Supabase's REST interface offers no multi-request transaction. Steps run one
by one; when a later step fails, the undo callbacks of the completed steps run
in reverse order. There is no isolation: other clients can observe the
intermediate state.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass
class CompensatingActions:
    """Records undo callbacks for completed steps."""

    name: str
    _undo_stack: list[tuple[str, Callable[[], Awaitable[object]]]] = field(
        default_factory=list
    )

    async def run(
        self,
        label: str,
        action: Callable[[], Awaitable[T]],
        undo: Callable[[T], Awaitable[object]] | None = None,
    ) -> T:
        """Run a step and register its undo, which receives the step result."""
        result = await action()
        if undo is not None:
            self._undo_stack.append((label, lambda: undo(result)))
        _logger.debug("%s: step %s done", self.name, label)
        return result

    async def compensate(self) -> None:
        """Undo completed steps, newest first. Undo failures are only logged."""
        while self._undo_stack:
            label, undo = self._undo_stack.pop()
            try:
                await undo()
            except Exception:
                _logger.exception("%s: failed to undo step %s", self.name, label)
            else:
                _logger.info("%s: undid step %s", self.name, label)


@asynccontextmanager
async def compensating(name: str) -> AsyncIterator[CompensatingActions]:
    """Yield a step recorder that compensates when the block raises."""
    actions = CompensatingActions(name=name)
    try:
        yield actions
    except Exception as exc:
        _logger.warning("%s failed, compensating: %s", name, exc)
        await actions.compensate()
        raise
