from .context import StageContextError, StageTaskResult, STATUS_RUNNING, STATUS_SUCCEEDED, STATUS_TERMINAL
from .traffic_update import (
    BlueGreenStageStrategy,
    DeploymentStrategy,
    TrafficUpdateTask,
    TrafficUpdateVerificationTask,
)

__all__ = [
    "BlueGreenStageStrategy",
    "DeploymentStrategy",
    "StageContextError",
    "StageTaskResult",
    "STATUS_RUNNING",
    "STATUS_SUCCEEDED",
    "STATUS_TERMINAL",
    "TrafficUpdateTask",
    "TrafficUpdateVerificationTask",
]
