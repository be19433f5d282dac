"""
Attempt policy for classifier calls.

The orchestrator hands every classifier call to a policy object. The
default makes exactly one attempt; a retrying policy can be swapped in
without touching the orchestrator.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class AttemptPolicy(ABC):

    @abstractmethod
    async def run(self, attempt: Callable[[], Awaitable[T]]) -> T:
        """Run `attempt` according to the policy and return its result or raise its error."""


class SingleAttemptPolicy(AttemptPolicy):
    """Fail fast: one call, its error is final."""

    async def run(self, attempt: Callable[[], Awaitable[T]]) -> T:
        return await attempt()
