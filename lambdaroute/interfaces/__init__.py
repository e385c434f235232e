# ===================================
# 📁 lambdaroute/interfaces/__init__.py
# ===================================

from .types import (
    RevisionSet, FunctionIdentity, ArtifactReference,
    DeploymentRequest, InvocationRequest, PromotionRequest, DeploymentOutcome,
    TaskStatus, TaskHandle, TaskOutcome, ComparisonOutcome,
)
from .collaborators import DeployBackend, StatusFetcher, ArtifactFetcher, RevisionSource


__all__ = [
    "RevisionSet", "FunctionIdentity", "ArtifactReference",
    "DeploymentRequest", "InvocationRequest", "PromotionRequest", "DeploymentOutcome",
    "TaskStatus", "TaskHandle", "TaskOutcome", "ComparisonOutcome",
    "DeployBackend", "StatusFetcher", "ArtifactFetcher", "RevisionSource",
]
