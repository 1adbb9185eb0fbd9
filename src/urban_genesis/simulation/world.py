"""World driver - runs the generation stages in order."""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum

from ..config import Config
from . import growth, infrastructure, landscape, structure, subdivision, traffic
from .state import GenerationState, TrailEvent

logger = logging.getLogger(__name__)


class Stage(Enum):
    """Generation stages, in execution order."""

    LANDSCAPE = "landscape"
    INFRASTRUCTURE = "infrastructure"
    GROWTH = "growth"
    STRUCTURE = "structure"
    SUBDIVISION = "subdivision"
    TRAFFIC = "traffic"
    DONE = "done"


STAGE_ORDER = list(Stage)


@dataclass
class WorldStats:
    """Statistics about the current generation state."""

    tick: int = 0
    stage: Stage = Stage.LANDSCAPE
    wave: int = 0
    agents_alive: int = 0
    road_segments: int = 0
    road_length: float = 0.0
    shapes: int = 0
    arterials: int = 0
    hubs: int = 0
    exits: int = 0
    rivers: int = 0
    bridges: int = 0
    trips: int = 0


class World:
    """
    The generated city and the stage sequence producing it.

    Hosts choose the cadence: `step` advances the current stage by one
    increment (one agent tick, one block, one trip), `advance` completes
    the current stage, and `generate` runs everything headless.
    """

    def __init__(self, config: Config | None = None):
        """
        Initialize the world.

        Args:
            config: Generation parameters; defaults to `Config.default()`
        """
        self.config = config or Config.default()

        # Seeded random number generator for reproducibility
        if self.config.world.seed is not None:
            self.seed = self.config.world.seed
        else:
            self.seed = random.randint(0, 2**31 - 1)

        self.state = GenerationState(self.config, self.seed)
        self.stage = Stage.LANDSCAPE
        self.stats = WorldStats()
        self.stats_history: deque[WorldStats] = deque(maxlen=300)
        self._subdivision_prepared = False

    @property
    def is_done(self) -> bool:
        return self.stage is Stage.DONE

    def _next_stage(self) -> None:
        self.stage = STAGE_ORDER[STAGE_ORDER.index(self.stage) + 1]
        logger.debug("Entering stage %s", self.stage.value)

    def step(self) -> list[TrailEvent]:
        """
        Advance the current stage by one increment.

        Returns:
            Trail events emitted by agents during this step
        """
        events: list[TrailEvent] = []
        state = self.state

        if self.stage is Stage.LANDSCAPE:
            landscape.run(state)
            self._next_stage()
        elif self.stage is Stage.INFRASTRUCTURE:
            infrastructure.run(state)
            self._next_stage()
        elif self.stage is Stage.GROWTH:
            if state.current_wave == 0:
                if not growth.start(state):
                    self._next_stage()
            elif any(a.is_alive for a in state.agents):
                events = growth.tick(state)
            elif not growth.advance_wave(state):
                growth.finish(state)
                self._next_stage()
        elif self.stage is Stage.STRUCTURE:
            structure.run(state)
            self._next_stage()
        elif self.stage is Stage.SUBDIVISION:
            if not self._subdivision_prepared:
                subdivision.prepare(state)
                self._subdivision_prepared = True
            if not subdivision.step(state):
                subdivision.finalize(state)
                self._next_stage()
        elif self.stage is Stage.TRAFFIC:
            if not traffic.run_trip(state):
                logger.info("Traffic: %d trips over %d used roads", state.trip_count, len(state.usage))
                self._next_stage()

        self._update_stats()
        return events

    def advance(self) -> Stage:
        """
        Run the current stage to completion.

        Returns:
            The stage that is now current
        """
        state = self.state
        if self.stage is Stage.DONE:
            return self.stage

        if self.stage is Stage.GROWTH:
            growth.resolve(state)
        elif self.stage is Stage.SUBDIVISION:
            if not self._subdivision_prepared:
                subdivision.prepare(state)
                self._subdivision_prepared = True
            subdivision.resolve(state)
        elif self.stage is Stage.TRAFFIC:
            traffic.resolve(state)
        else:
            # Single-shot stages
            self.step()
            return self.stage

        self._next_stage()
        self._update_stats()
        return self.stage

    def resolve(self) -> None:
        """Run every remaining stage."""
        while not self.is_done:
            self.advance()

    def generate(self) -> GenerationState:
        """Generate the whole city and return its state."""
        logger.info("Generating %dx%d city with seed %d", self.config.world.width, self.config.world.height, self.seed)
        self.resolve()
        return self.state

    def _update_stats(self) -> None:
        state = self.state
        self.stats = WorldStats(
            tick=state.tick,
            stage=self.stage,
            wave=state.current_wave,
            agents_alive=sum(1 for a in state.agents if a.is_alive),
            road_segments=len(state.roads),
            road_length=sum(s.length() for s in state.roads),
            shapes=len(state.shapes),
            arterials=len(state.arterials),
            hubs=len(state.hubs),
            exits=len(state.exits),
            rivers=len(state.rivers),
            bridges=len(state.geography.bridges),
            trips=state.trip_count,
        )
        self.stats_history.append(self.stats)
