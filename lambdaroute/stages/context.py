"""
context.py

Translation between pipeline stage contexts (untyped dicts produced by the
pipeline engine) and the typed request/outcome models. Nothing below the
stage adapters sees a raw context.
"""

from typing import Any, Dict, Optional, TypedDict

from lambdaroute.interfaces.types.deployment import (
    ArtifactReference,
    DeploymentOutcome,
    DeploymentRequest,
    FunctionIdentity,
)

STATUS_SUCCEEDED = "SUCCEEDED"
STATUS_RUNNING = "RUNNING"
STATUS_TERMINAL = "TERMINAL"


class StageTaskResult(TypedDict):
    status: str
    outputs: Dict[str, Any]


class StageContextError(ValueError):
    """The stage context lacks a field or carries an unusable value."""


def task_result(status: str, outputs: Optional[Dict[str, Any]] = None) -> StageTaskResult:
    return StageTaskResult(status=status, outputs=dict(outputs or {}))


def error_result(message: str, outputs: Optional[Dict[str, Any]] = None) -> StageTaskResult:
    merged = dict(outputs or {})
    merged["failureMessage"] = message
    return task_result(STATUS_TERMINAL, merged)


def _require(context: Dict[str, Any], key: str) -> Any:
    value = context.get(key)
    if value is None or value == "":
        raise StageContextError(f"Stage context is missing '{key}'")
    return value


def function_identity(context: Dict[str, Any], application: Optional[str] = None) -> FunctionIdentity:
    return FunctionIdentity(
        function_name=_require(context, "functionName"),
        account=_require(context, "account"),
        region=_require(context, "region"),
        app_name=application or context.get("appName"),
    )


def artifact_reference(context: Dict[str, Any], key: str) -> ArtifactReference:
    """Reads '<key>': {'artifact': {...}} as produced by the stage config form."""
    wrapper = _require(context, key)
    artifact = wrapper.get("artifact", wrapper) if isinstance(wrapper, dict) else None
    if not isinstance(artifact, dict) or not artifact.get("reference"):
        raise StageContextError(f"Stage context '{key}' does not hold an artifact with a reference")
    return ArtifactReference.model_validate(artifact)


def build_deployment_request(
    context: Dict[str, Any],
    identity: FunctionIdentity,
    major_version: str,
    minor_version: str,
    latest_version: str,
) -> DeploymentRequest:
    try:
        timeout_seconds = float(_require(context, "timeout"))
        minor_weight = float(context.get("weightToMinorFunctionVersion") or 0.0)
    except (TypeError, ValueError) as e:
        raise StageContextError(f"Stage context holds a non-numeric timeout or weight: {e}") from e

    return DeploymentRequest(
        function=identity,
        alias_name=_require(context, "aliasName"),
        major_version=major_version,
        major_weight=1.0 - minor_weight,
        minor_version=minor_version,
        minor_weight=minor_weight,
        output_artifact=artifact_reference(context, "outputArtifact"),
        payload_artifact=artifact_reference(context, "payloadArtifact"),
        timeout_seconds=timeout_seconds,
        latest_version_qualifier=latest_version,
    )


def outcome_outputs(outcome: DeploymentOutcome) -> Dict[str, Any]:
    outputs: Dict[str, Any] = dict(outcome.side_effects)
    if outcome.operation_url:
        outputs["url"] = outcome.operation_url
    return outputs


