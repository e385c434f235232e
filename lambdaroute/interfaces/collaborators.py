"""
collaborators.py

Interfaces the orchestrator is constructed with. Concrete implementations
live in lambdaroute.sdk (clouddriver over HTTP); tests pass fakes.
"""

from typing import Any, Dict, Protocol, runtime_checkable

from .types.deployment import ArtifactReference, FunctionIdentity, InvocationRequest, PromotionRequest, RevisionSet
from .types.task import TaskHandle, TaskOutcome


@runtime_checkable
class DeployBackend(Protocol):
    async def invoke(self, request: InvocationRequest) -> TaskHandle:
        """Submits a function invocation and returns the locator of the resulting task."""
        ...

    async def promote(self, request: PromotionRequest) -> Dict[str, Any]:
        """Applies alias weights. Raises on failure."""
        ...


@runtime_checkable
class StatusFetcher(Protocol):
    async def fetch_status(self, handle: TaskHandle) -> TaskOutcome:
        """
        Queries the task once. Raises TransientStatusError (or an httpx
        transport error) when the status could not be read this time.
        """
        ...


@runtime_checkable
class ArtifactFetcher(Protocol):
    async def fetch_artifact(self, reference: ArtifactReference) -> bytes:
        """Returns raw artifact content. Raises ArtifactFetchError on I/O failure."""
        ...


@runtime_checkable
class RevisionSource(Protocol):
    async def get_revisions(self, identity: FunctionIdentity) -> RevisionSet:
        """Published revisions of the function, keyed by an opaque label."""
        ...
