"""
main_orchestrator.py

Blue/green verification and promotion of a Lambda alias.

One run: invoke the candidate (minor) version with the configured payload,
poll the resulting clouddriver task until it finishes, compare its output
with the expected-output artifact and, when they match, point the alias
fully at the candidate. Every failure ends the run with a DeploymentOutcome
carrying a readable message; nothing is raised to the caller.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from lambdaroute.core.comparison.comparator import ContentComparator
from lambdaroute.core.exceptions import (
    BlueGreenDeploymentError,
    ComparisonMismatchError,
    InvocationSubmitError,
    NotResolvableError,
    PromotionFailedError,
    RemoteTaskFailedError,
    RetriesExhaustedError,
)
from lambdaroute.core.retry import RetryPolicy
from lambdaroute.core.task_runner.poller import TaskPoller
from lambdaroute.core.versioning.resolver import resolve_single
from lambdaroute.interfaces.collaborators import ArtifactFetcher, DeployBackend, RevisionSource, StatusFetcher
from lambdaroute.interfaces.types.deployment import (
    DeploymentOutcome,
    DeploymentRequest,
    InvocationRequest,
    PromotionRequest,
)
from lambdaroute.interfaces.types.task import TaskHandle, TaskOutcome, TaskStatus
from lambdaroute.shared.app_config import AppConfig

from .state import BlueGreenState, can_transition
from .trace_utils import mark_span_error, mark_span_ok, start_trace_span_if_available
from .utils import message_summary, snippet

logger = logging.getLogger(__name__)

STRATEGY_NAME = "BlueGreenDeploymentStrategy"

SIDE_EFFECT_MAJOR_VERSION = "deployment:majorVersionDeployed"
SIDE_EFFECT_ALIAS = "deployment:aliasDeployed"
SIDE_EFFECT_STRATEGY = "deployment:strategyUsed"


class _RunState:
    """Per-run bookkeeping. Never shared between runs."""

    def __init__(self, request: DeploymentRequest):
        self.request = request
        self.state = BlueGreenState.INVOKING

    def advance(self, target: BlueGreenState) -> None:
        if not can_transition(self.state, target):
            raise RuntimeError(f"Illegal blue/green transition {self.state.value} -> {target.value}")
        logger.debug(f"Alias '{self.request.alias_name}': {self.state.value} -> {target.value}")
        self.state = target


class BlueGreenOrchestrator:
    def __init__(
        self,
        deploy_backend: DeployBackend,
        status_fetcher: StatusFetcher,
        artifact_fetcher: ArtifactFetcher,
        config: Optional[AppConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        revision_source: Optional[RevisionSource] = None,
    ):
        self.config = config or AppConfig()
        self.deploy_backend = deploy_backend
        self.revision_source = revision_source
        self.poller = TaskPoller(status_fetcher, poll_interval=self.config.poll_interval_seconds, sleep=sleep)
        self.comparator = ContentComparator(
            artifact_fetcher,
            RetryPolicy(
                max_attempts=self.config.artifact_fetch_attempts,
                delay=self.config.artifact_fetch_delay_seconds,
                exponential=self.config.artifact_fetch_exponential,
                overall_timeout=self.config.artifact_fetch_timeout_seconds,
                sleep=sleep,
            ),
        )

    async def run(self, request: DeploymentRequest, cancel_event: Optional[asyncio.Event] = None) -> DeploymentOutcome:
        run_state = _RunState(request)
        logger.info(
            f"Starting blue/green deployment of '{request.function.function_name}' alias '{request.alias_name}': "
            f"candidate {request.minor_version}, current {request.major_version}"
        )
        try:
            request = await self._resolve_versions(request)
            run_state.request = request
            handle = await self._invoke(request)
            run_state.advance(BlueGreenState.POLLING)
            return await self._verify_and_promote(run_state, handle, request.timeout_seconds, cancel_event)
        except BlueGreenDeploymentError as e:
            return self._fail(run_state, e.message)

    async def resume_from_polling(
        self,
        request: DeploymentRequest,
        handle: TaskHandle,
        remaining_seconds: float,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> DeploymentOutcome:
        """
        Re-enters a run at the polling step with the budget left over from an
        earlier process. The caller persists handle and remaining budget.
        """
        run_state = _RunState(request)
        logger.info(f"Resuming blue/green verification of task {handle.url} with {remaining_seconds}s left")
        try:
            run_state.request = await self._resolve_versions(request)
            run_state.advance(BlueGreenState.POLLING)
            return await self._verify_and_promote(run_state, handle, remaining_seconds, cancel_event)
        except BlueGreenDeploymentError as e:
            return self._fail(run_state, e.message)

    async def _resolve_versions(self, request: DeploymentRequest) -> DeploymentRequest:
        """Replaces symbolic qualifiers ($LATEST, $PREVIOUS, ...) with concrete version ids."""
        symbolic = {
            field: value
            for field, value in (
                ("major_version", request.major_version),
                ("minor_version", request.minor_version),
                ("latest_version_qualifier", request.latest_version_qualifier),
            )
            if value and value.startswith("$")
        }
        if not symbolic:
            return request
        if self.revision_source is None:
            raise NotResolvableError(next(iter(symbolic.values())), "no revision source to resolve it against")

        try:
            revisions = await self.revision_source.get_revisions(request.function)
        except Exception as e:
            logger.error(f"Revision lookup for {request.function.function_name} failed: {e}", exc_info=True)
            raise BlueGreenDeploymentError(
                f"Could not look up revisions of {request.function.function_name}: {e}", stage="RESOLVING"
            ) from e

        resolved = {field: resolve_single(value, revisions) for field, value in symbolic.items()}
        logger.info(f"Resolved versions for {request.function.function_name}: {resolved}")
        return request.model_copy(update=resolved)

    async def _verify_and_promote(
        self,
        run_state: _RunState,
        handle: TaskHandle,
        budget: float,
        cancel_event: Optional[asyncio.Event],
    ) -> DeploymentOutcome:
        request = run_state.request
        task_outcome = await self._poll(handle, budget, cancel_event)
        run_state.advance(BlueGreenState.COMPARING)
        await self._compare(request, task_outcome)
        run_state.advance(BlueGreenState.PROMOTING)
        outcome = await self._promote(request)
        run_state.advance(BlueGreenState.SUCCEEDED)
        return outcome

    def _fail(self, run_state: _RunState, message: str) -> DeploymentOutcome:
        failed_in = run_state.state
        run_state.advance(BlueGreenState.FAILED)
        logger.error(f"BlueGreen Deployment failed during {failed_in.value}: {message}")
        return DeploymentOutcome.failed(message)

    async def _invoke(self, request: DeploymentRequest) -> TaskHandle:
        invocation = InvocationRequest(
            function=request.function,
            qualifier=request.minor_version,
            payload_artifact=request.payload_artifact,
        )
        span = start_trace_span_if_available(
            "bluegreen.invoke",
            function_name=request.function.function_name,
            qualifier=request.minor_version,
        )
        with span:
            try:
                handle = await self.deploy_backend.invoke(invocation)
            except Exception as e:
                logger.error(f"Could not submit invocation of {request.function.function_name}:{request.minor_version}: {e}", exc_info=True)
                mark_span_error(span, "Invocation submit failed", e)
                raise InvocationSubmitError(f"Lambda Invocation could not be submitted: {e}") from e
            span.set_attribute("task.url", handle.url)
            mark_span_ok(span)
        logger.debug(f"Posted invocation for blue/green verification: {handle.url}")
        return handle

    async def _poll(self, handle: TaskHandle, budget: float, cancel_event: Optional[asyncio.Event]) -> TaskOutcome:
        span = start_trace_span_if_available("bluegreen.poll", task_url=handle.url, budget_seconds=budget)
        with span:
            try:
                task_outcome = await self.poller.poll(handle, budget, cancel_event=cancel_event)
            except BlueGreenDeploymentError as e:
                mark_span_error(span, e.message, e)
                raise
            except Exception as e:
                logger.error(f"Status check of task {handle.url} failed: {e}", exc_info=True)
                mark_span_error(span, "Status check failed", e)
                raise BlueGreenDeploymentError(f"Lambda Invocation status check failed: {e}", stage="POLLING") from e

            if task_outcome.status is TaskStatus.FAILED:
                remote = task_outcome.error_message
                message = "Lambda Invocation returned failure"
                if remote:
                    message = f"{message}: {remote}"
                mark_span_error(span, "Invocation returned failure")
                raise RemoteTaskFailedError(message, remote_message=remote)
            mark_span_ok(span)
        return task_outcome

    async def _compare(self, request: DeploymentRequest, task_outcome: TaskOutcome) -> None:
        span = start_trace_span_if_available("bluegreen.compare", artifact_reference=request.output_artifact.reference)
        with span:
            try:
                comparison = await self.comparator.compare(request.output_artifact, task_outcome.result_payload)
            except RetriesExhaustedError as e:
                mark_span_error(span, "Expected output fetch failed", e)
                raise BlueGreenDeploymentError(
                    f"Could not fetch expected output artifact '{request.output_artifact.reference}': {e.message}",
                    stage="COMPARING",
                ) from e
            except Exception as e:
                logger.error(f"Fetching expected output artifact failed: {e}", exc_info=True)
                mark_span_error(span, "Expected output fetch failed", e)
                raise BlueGreenDeploymentError(
                    f"Could not fetch expected output artifact '{request.output_artifact.reference}': {e}",
                    stage="COMPARING",
                ) from e

            if not comparison.matched:
                logger.error(f"Response string: {snippet(task_outcome.result_payload)}")
                mismatch = ComparisonMismatchError(comparison.expected, comparison.actual)
                mark_span_error(span, "Comparison failed")
                if task_outcome.error_message:
                    mismatch.message = f"{mismatch.message} \n {task_outcome.error_message}"
                raise mismatch
            mark_span_ok(span)

    async def _promote(self, request: DeploymentRequest) -> DeploymentOutcome:
        target = request.promotion_target
        promotion = PromotionRequest(
            function=request.function,
            alias_name=request.alias_name,
            major_version=target,
            major_weight=1.0,
            minor_version=None,
            minor_weight=0.0,
        )
        span = start_trace_span_if_available("bluegreen.promote", alias=request.alias_name, major_version=target)
        with span:
            try:
                result = await self.deploy_backend.promote(promotion)
            except Exception as e:
                logger.error(f"Promotion of alias '{request.alias_name}' to {target} failed: {e}", exc_info=True)
                mark_span_error(span, "Promotion failed", e)
                raise PromotionFailedError(f"Promotion failed: {e}") from e
            mark_span_ok(span)
        logger.debug(f"Promotion response: {message_summary(result)}")

        side_effects: Dict[str, Any] = {
            SIDE_EFFECT_MAJOR_VERSION: target,
            SIDE_EFFECT_ALIAS: request.alias_name,
            SIDE_EFFECT_STRATEGY: STRATEGY_NAME,
        }
        operation_url = result.get("url") if isinstance(result, dict) else None
        logger.info(f"Alias '{request.alias_name}' of {request.function.function_name} now routes all traffic to {target}")
        return DeploymentOutcome(
            succeeded=True,
            promoted_version=target,
            side_effects=side_effects,
            operation_url=operation_url,
        )


async def run_blue_green_deployment(
    request: DeploymentRequest,
    *,
    deploy_backend: DeployBackend,
    status_fetcher: StatusFetcher,
    artifact_fetcher: ArtifactFetcher,
    config: Optional[AppConfig] = None,
    revision_source: Optional[RevisionSource] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> DeploymentOutcome:
    orchestrator = BlueGreenOrchestrator(
        deploy_backend, status_fetcher, artifact_fetcher, config=config, revision_source=revision_source
    )
    return await orchestrator.run(request, cancel_event=cancel_event)
