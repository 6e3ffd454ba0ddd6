"""
Response rendering simulator - reveals a complete response character by character
with model-specific, punctuation-aware pacing.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, Union

from infrastructure.monitoring.logging_service import get_logger
from services.render_service.models import ModelId, PacingProfile, get_model_profile

SENTENCE_TERMINATORS = frozenset(".!?")
CLAUSE_SEPARATORS = frozenset(",;")


def pause_multiplier(unit: str) -> float:
    """Delay multiplier applied after emitting `unit`"""
    if unit in SENTENCE_TERMINATORS:
        return 3.0
    elif unit in CLAUSE_SEPARATORS:
        return 1.5
    elif unit == "\n":
        return 2.0
    return 1.0


class ResponseSimulator:
    """
    Turns a full response into a stream of growing prefixes.

    `render` is a coroutine: cancelling the task that runs it stops the stream
    at its next pause, after which no callback fires.
    """

    def __init__(
        self,
        time_unit_seconds: float = 0.001,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None
    ):
        self.logger = get_logger(__name__)
        self.time_unit_seconds = time_unit_seconds
        self._sleep = sleep
        self._rng = rng or random.Random()

    def delay_after(self, unit: str, pacing: PacingProfile) -> float:
        """Pause after `unit`, in profile time units"""
        base = self._rng.uniform(pacing.min_delay, pacing.max_delay)
        return base * pause_multiplier(unit)

    async def render(
        self,
        text: str,
        model_id: Union[str, ModelId],
        on_update: Callable[[str], None],
        on_complete: Callable[[], None]
    ) -> None:
        """
        Reveal `text` one character at a time

        Args:
            text: Complete response
            model_id: Selects the pacing profile; unknown ids use the default model
            on_update: Called with each strictly longer prefix
            on_complete: Called exactly once after the final prefix
        """
        profile = get_model_profile(model_id)
        self.logger.debug(f"Rendering {len(text)} characters with {profile.name} pacing")

        try:
            for index, unit in enumerate(text):
                on_update(text[:index + 1])
                if index < len(text) - 1:
                    await self._sleep(self.delay_after(unit, profile.pacing) * self.time_unit_seconds)
        except asyncio.CancelledError:
            self.logger.debug(f"Rendering cancelled after {index + 1}/{len(text)} characters")
            raise

        on_complete()
