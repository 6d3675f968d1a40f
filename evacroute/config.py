"""
evacroute Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


class Config:
    """Application configuration loaded from environment variables."""

    # Graph capacity (rejected, never truncated, when exceeded)
    MAX_NODES: int = _env_int("EVAC_MAX_NODES", "100")
    MAX_EDGES: int = _env_int("EVAC_MAX_EDGES", "200")

    # Risk model
    RISK_WEIGHT: float = _env_float("EVAC_RISK_WEIGHT", "10.0")
    HAZARD_NORMALIZER: float = _env_float("EVAC_HAZARD_NORMALIZER", "2000.0")
    HAZARD_THRESHOLD: float = _env_float("EVAC_HAZARD_THRESHOLD", "0.8")

    # Control loop
    TICK_INTERVAL_SECONDS: float = _env_float("EVAC_TICK_INTERVAL_SECONDS", "0.5")

    # Search guards (0 disables the guard)
    MAX_SEARCH_ITERATIONS: int = _env_int("EVAC_MAX_SEARCH_ITERATIONS", "0")
    SEARCH_DEADLINE_SECONDS: float = _env_float("EVAC_SEARCH_DEADLINE_SECONDS", "0")

    # Alert thresholds handed to the alert collaborator
    GAS_ALERT_PPM: float = _env_float("EVAC_GAS_ALERT_PPM", "50.0")
    CO2_ALERT_PPM: int = _env_int("EVAC_CO2_ALERT_PPM", "1000")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    SCENARIOS_DIR: Path = PROJECT_ROOT / "examples" / "scenarios"

    @classmethod
    def max_search_iterations(cls) -> int | None:
        """Iteration guard for PathFinder, or None when disabled."""
        return cls.MAX_SEARCH_ITERATIONS if cls.MAX_SEARCH_ITERATIONS > 0 else None

    @classmethod
    def search_deadline_seconds(cls) -> float | None:
        """Wall-clock guard for PathFinder, or None when disabled."""
        return cls.SEARCH_DEADLINE_SECONDS if cls.SEARCH_DEADLINE_SECONDS > 0 else None

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are out of range."""
        if cls.MAX_NODES <= 0 or cls.MAX_EDGES <= 0:
            raise ValueError(
                "EVAC_MAX_NODES and EVAC_MAX_EDGES must be positive "
                f"(got {cls.MAX_NODES}, {cls.MAX_EDGES})"
            )

        if not 0.0 <= cls.HAZARD_THRESHOLD <= 1.0:
            raise ValueError(
                f"EVAC_HAZARD_THRESHOLD must lie in [0, 1] (got {cls.HAZARD_THRESHOLD})"
            )

        if cls.RISK_WEIGHT < 0:
            raise ValueError(f"EVAC_RISK_WEIGHT must be >= 0 (got {cls.RISK_WEIGHT})")

        if cls.HAZARD_NORMALIZER <= 0:
            raise ValueError(
                f"EVAC_HAZARD_NORMALIZER must be positive (got {cls.HAZARD_NORMALIZER})"
            )

        if cls.TICK_INTERVAL_SECONDS < 0:
            raise ValueError(
                "EVAC_TICK_INTERVAL_SECONDS must be >= 0 "
                f"(got {cls.TICK_INTERVAL_SECONDS})"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "evacroute Configuration:",
            f"  Capacity: {cls.MAX_NODES} nodes / {cls.MAX_EDGES} edges",
            f"  Risk Weight: {cls.RISK_WEIGHT}",
            f"  Hazard Normalizer: {cls.HAZARD_NORMALIZER}",
            f"  Replan Threshold: {cls.HAZARD_THRESHOLD}",
            f"  Tick Interval: {cls.TICK_INTERVAL_SECONDS}s",
            f"  Search Guards: iterations={cls.max_search_iterations()}, "
            f"deadline={cls.search_deadline_seconds()}",
            f"  Alerts: gas>{cls.GAS_ALERT_PPM} ppm, co2>{cls.CO2_ALERT_PPM} ppm",
        ]
        return "\n".join(lines)
