"""
traffic_update.py

Pipeline stage tasks for routing Lambda alias traffic.

TrafficUpdateTask picks the deployment strategy named in the stage context,
builds a typed DeploymentRequest and runs it. TrafficUpdateVerificationTask
checks the task URL left behind by the update once per invocation and lets
the pipeline engine re-schedule it while it is still running.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional

import pydantic

from lambdaroute.core.exceptions import BlueGreenDeploymentError, NotResolvableError
from lambdaroute.core.orchestrator.main_orchestrator import BlueGreenOrchestrator
from lambdaroute.core.task_runner.poller import TRANSIENT_STATUS_ERRORS, TaskPoller
from lambdaroute.core.versioning.resolver import LATEST_LABEL, resolve_single
from lambdaroute.interfaces.types.deployment import DeploymentRequest
from lambdaroute.interfaces.types.task import TaskHandle, TaskStatus
from lambdaroute.sdk.client import CloudDriverClient
from lambdaroute.sdk.exceptions import CloudDriverSDKError
from lambdaroute.shared.app_config import AppConfig

from .context import (
    STATUS_RUNNING,
    STATUS_SUCCEEDED,
    StageContextError,
    StageTaskResult,
    build_deployment_request,
    error_result,
    function_identity,
    outcome_outputs,
    task_result,
)

logger = logging.getLogger(__name__)


class DeploymentStrategy(str, Enum):
    BLUEGREEN = "$BLUEGREEN"

    @classmethod
    def from_context(cls, value: Optional[str]) -> "DeploymentStrategy":
        if not value:
            raise StageContextError("Stage context is missing 'deploymentStrategy'")
        normalized = value if value.startswith("$") else f"${value}"
        try:
            return cls(normalized.upper())
        except ValueError as e:
            raise StageContextError(f"Unsupported deployment strategy '{value}'") from e


class BlueGreenStageStrategy:
    """Blue/green strategy: verify the newest published version, then promote it."""

    def __init__(self, client: CloudDriverClient, config: AppConfig, cancel_event: Optional[asyncio.Event] = None):
        self.client = client
        self.config = config
        self.cancel_event = cancel_event

    async def setup_input(self, context: Dict[str, Any], application: Optional[str] = None) -> DeploymentRequest:
        identity = function_identity(context, application)
        revisions = await self.client.get_revisions(
            identity,
            should_retry=True,
            attempts=self.config.function_lookup_attempts,
            delay=self.config.function_lookup_delay_seconds,
        )
        latest = resolve_single(LATEST_LABEL, revisions)
        major = resolve_single(str(context.get("majorFunctionVersion") or LATEST_LABEL), revisions)
        logger.info(f"Blue/green input for {identity.function_name}: candidate {latest}, current {major}")
        return build_deployment_request(
            context,
            identity,
            major_version=major,
            minor_version=latest,
            latest_version=latest,
        )

    async def deploy(self, request: DeploymentRequest):
        orchestrator = BlueGreenOrchestrator(
            deploy_backend=self.client,
            status_fetcher=self.client,
            artifact_fetcher=self.client,
            revision_source=self.client,
            config=self.config,
        )
        return await orchestrator.run(request, cancel_event=self.cancel_event)


class TrafficUpdateTask:
    def __init__(self, client: CloudDriverClient, config: Optional[AppConfig] = None, cancel_event: Optional[asyncio.Event] = None):
        self.client = client
        self.config = config or AppConfig()
        self.cancel_event = cancel_event

    def _strategy(self, strategy: DeploymentStrategy) -> BlueGreenStageStrategy:
        if strategy is DeploymentStrategy.BLUEGREEN:
            return BlueGreenStageStrategy(self.client, self.config, self.cancel_event)
        raise StageContextError(f"No implementation for deployment strategy {strategy.value}")

    async def execute(self, context: Dict[str, Any], application: Optional[str] = None) -> StageTaskResult:
        logger.debug("Executing TrafficUpdateTask...")
        if "aliasName" not in context:
            logger.info("No aliasName in stage context; nothing to route.")
            return task_result(STATUS_SUCCEEDED)

        try:
            strategy = self._strategy(DeploymentStrategy.from_context(context.get("deploymentStrategy")))
            request = await strategy.setup_input(context, application)
        except (StageContextError, NotResolvableError, pydantic.ValidationError) as e:
            logger.error(f"Could not set up traffic update: {e}")
            return error_result(str(e))
        except CloudDriverSDKError as e:
            logger.error(f"Clouddriver lookup failed while setting up traffic update: {e}", exc_info=True)
            return error_result(f"Deployment failed: {e.message}")

        outcome = await strategy.deploy(request)
        if not outcome.succeeded:
            return error_result(outcome.error_message or "Deployment failed")
        return task_result(STATUS_SUCCEEDED, outcome_outputs(outcome))


class TrafficUpdateVerificationTask:
    def __init__(self, client: CloudDriverClient):
        self.poller = TaskPoller(client)

    async def execute(self, context: Dict[str, Any]) -> StageTaskResult:
        url = context.get("url")
        if not url:
            return error_result("No task url to verify")

        try:
            outcome = await self.poller.check_once(TaskHandle(url=url))
        except TRANSIENT_STATUS_ERRORS as e:
            logger.warning(f"Could not read task {url}, will check again: {e}")
            return task_result(STATUS_RUNNING)
        except (BlueGreenDeploymentError, CloudDriverSDKError) as e:
            logger.error(f"Verifying task {url} failed: {e}")
            return error_result(str(e))

        if outcome.status is TaskStatus.RUNNING:
            return task_result(STATUS_RUNNING)
        if outcome.status is TaskStatus.FAILED:
            return error_result(outcome.error_message or "Traffic update task failed")
        return task_result(STATUS_SUCCEEDED, {key: value for key, value in context.items() if key.startswith("deployment:")})
