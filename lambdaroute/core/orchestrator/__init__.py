from .main_orchestrator import (
    BlueGreenOrchestrator,
    run_blue_green_deployment,
    STRATEGY_NAME,
    SIDE_EFFECT_ALIAS,
    SIDE_EFFECT_MAJOR_VERSION,
    SIDE_EFFECT_STRATEGY,
)
from .state import BlueGreenState

__all__ = [
    "BlueGreenOrchestrator",
    "BlueGreenState",
    "run_blue_green_deployment",
    "STRATEGY_NAME",
    "SIDE_EFFECT_ALIAS",
    "SIDE_EFFECT_MAJOR_VERSION",
    "SIDE_EFFECT_STRATEGY",
]
