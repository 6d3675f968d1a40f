"""
HazardSource interface for feeding environmental readings into the control loop.

The control loop never talks to sensors directly. A HazardSource produces one
HazardSnapshot per tick; real deployments wrap the sensor-fusion layer, demos
and tests replay a script.

Design principle: the source is read once at the start of each tick and the
snapshot is treated as immutable for the rest of that tick.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List

from .schemas import HazardSnapshot


class HazardSource(ABC):
    """Abstract base class for per-tick hazard readings.

    Subclasses are dependency-injected into EvacuationController, so the same
    planning loop runs against live sensors, recorded traces or scripted
    scenarios.
    """

    @abstractmethod
    def read(self, tick: int) -> HazardSnapshot:
        """
        Return the hazard snapshot for ``tick``.

        Args:
            tick: Current tick number (1-indexed)

        Returns:
            HazardSnapshot describing the environment for this tick
        """
        pass

    def on_start(self) -> None:
        """Hook called once before the first tick (open devices, reset cursors)."""

    def on_stop(self) -> None:
        """Hook called once after the last tick, even if the loop failed."""


class ScriptedHazardSource(HazardSource):
    """Replays a fixed list of snapshots, one per tick.

    Once the script runs out the last snapshot is repeated, or a clean
    (all-zero) snapshot is returned when ``repeat_last`` is False. An empty
    script always yields clean snapshots.
    """

    def __init__(self, snapshots: Iterable[HazardSnapshot], repeat_last: bool = True):
        self.snapshots: List[HazardSnapshot] = list(snapshots)
        self.repeat_last = repeat_last
        self.reads = 0

    def read(self, tick: int) -> HazardSnapshot:
        self.reads += 1
        index = max(tick - 1, 0)
        if index < len(self.snapshots):
            return self.snapshots[index]
        if self.repeat_last and self.snapshots:
            return self.snapshots[-1]
        return HazardSnapshot()

    def on_start(self) -> None:
        self.reads = 0
