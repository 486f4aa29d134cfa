"""
Sequential stage pipeline.

Each stage receives the previous stage's output. A failing stage stops the
run, so later stages never start without their input.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

StageFn = Callable[[Any], Awaitable[Any]]
StageListener = Callable[["Stage"], None]


@dataclass(frozen=True)
class Stage:
    name: str
    run: StageFn
    description: str = ""


class SequentialPipeline:
    """Run named async stages strictly one after another."""

    def __init__(self, stages: Sequence[Stage]) -> None:
        if not stages:
            raise ValueError("pipeline needs at least one stage")
        self._stages = tuple(stages)

    @property
    def stage_names(self) -> list[str]:
        return [stage.name for stage in self._stages]

    async def run(self, value: Any, on_stage: StageListener | None = None) -> Any:
        for stage in self._stages:
            logger.debug(f"[Pipeline] Starting stage '{stage.name}'")
            if on_stage is not None:
                on_stage(stage)
            value = await stage.run(value)
        return value
