"""
Mall east wing - guidance through a spreading kitchen fire
==========================================================

WHAT THIS SHOWS:
- Loading a facility from a map file plus an area registry CSV
- Per-area hazard levels driving edge risk
- The route switching corridors when the food court fills with smoke
- The occupant walking the route one node per tick until an exit

RUN:
    python -m examples.mall.run
    EVAC_TICK_INTERVAL_SECONDS=0 python -m examples.mall.run   # no pauses
"""

import asyncio

from evacroute import (
    Config,
    EvacuationController,
    GuidanceUpdate,
    ScenarioLoader,
    ScriptedHazardSource,
)


def show_display(update: GuidanceUpdate) -> None:
    """Stand-in for the glyph display: one line per tick."""
    alarm = "  ALARM" if update.alert else ""
    arrived = "  (at exit)" if update.at_exit else ""
    print(f"  DISPLAY [{update.glyph}]{alarm}{arrived}")


async def main() -> None:
    print(Config.display())
    print()

    scenario, graph = ScenarioLoader().load("mall_east_wing")
    print(f"{scenario.name}: {scenario.description}\n")

    controller = EvacuationController.from_config(
        graph,
        ScriptedHazardSource(scenario.hazards),
        scenario.start_area,
        per_area=scenario.per_area,
        listeners=[show_display],
        advance_occupant=True,
    )
    if scenario.threshold is not None:
        controller.monitor.threshold = scenario.threshold

    updates = await controller.run(len(scenario.hazards) + 1)

    replans = sum(1 for update in updates if update.replanned)
    print(f"\nOccupant finished in area {controller.current_area} after {replans} route change(s)")


if __name__ == "__main__":
    asyncio.run(main())
