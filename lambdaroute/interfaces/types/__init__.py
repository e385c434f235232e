# ==================================
# 📁 lambdaroute/interfaces/types/__init__.py
# ==================================

from .deployment import (
    RevisionSet, FunctionIdentity, ArtifactReference,
    DeploymentRequest, InvocationRequest, PromotionRequest, DeploymentOutcome,
)
from .task import TaskStatus, TaskHandle, TaskOutcome, ComparisonOutcome


__all__ = [
    # Deployment types
    "RevisionSet", "FunctionIdentity", "ArtifactReference",
    "DeploymentRequest", "InvocationRequest", "PromotionRequest", "DeploymentOutcome",

    # Task types
    "TaskStatus", "TaskHandle", "TaskOutcome", "ComparisonOutcome",
]
