from unittest.mock import MagicMock

import httpx
import pytest

from lambdaroute.core.exceptions import TransientStatusError
from lambdaroute.interfaces.types.task import TaskHandle, TaskStatus
from lambdaroute.sdk.client import CloudDriverClient
from lambdaroute.sdk.exceptions import APIError, NotFoundError, TaskStatusError
from lambdaroute.stages.context import STATUS_RUNNING, STATUS_SUCCEEDED, STATUS_TERMINAL
from lambdaroute.stages.traffic_update import (
    DeploymentStrategy,
    TrafficUpdateTask,
    TrafficUpdateVerificationTask,
)

from fakes import TASK_URL, failed, running, succeeded

REVISIONS = {
    "arn:aws:lambda:us-west-2:1:function:shop-orders-handler:1": "1",
    "arn:aws:lambda:us-west-2:1:function:shop-orders-handler:2": "2",
    "arn:aws:lambda:us-west-2:1:function:shop-orders-handler:3": "3",
}


@pytest.fixture
def client():
    mock_client = MagicMock(spec=CloudDriverClient)
    mock_client.get_revisions.return_value = dict(REVISIONS)
    mock_client.invoke.return_value = TaskHandle(url=TASK_URL)
    mock_client.fetch_status.return_value = succeeded('{"ok": true}')
    mock_client.fetch_artifact.return_value = b'{"ok":true}'
    mock_client.promote.return_value = {"url": "http://clouddriver.test/task/op-1"}
    return mock_client


@pytest.fixture
def stage_context():
    return {
        "functionName": "orders-handler",
        "account": "aws-prod",
        "region": "us-west-2",
        "aliasName": "live",
        "deploymentStrategy": "$BLUEGREEN",
        "majorFunctionVersion": "2",
        "timeout": 30,
        "outputArtifact": {"artifact": {"reference": "s3://bucket/expected.json", "type": "s3/object"}},
        "payloadArtifact": {"artifact": {"reference": "s3://bucket/payload.json", "type": "s3/object"}},
    }


@pytest.mark.parametrize("value", ["$BLUEGREEN", "BLUEGREEN", "$bluegreen"])
def test_strategy_names(value):
    assert DeploymentStrategy.from_context(value) is DeploymentStrategy.BLUEGREEN


@pytest.mark.asyncio
async def test_context_without_alias_is_a_no_op(client, stage_context, app_config):
    del stage_context["aliasName"]

    result = await TrafficUpdateTask(client, app_config).execute(stage_context, "shop")

    assert result["status"] == STATUS_SUCCEEDED
    client.get_revisions.assert_not_called()
    client.invoke.assert_not_called()


@pytest.mark.asyncio
async def test_blue_green_traffic_update_succeeds(client, stage_context, app_config):
    result = await TrafficUpdateTask(client, app_config).execute(stage_context, "shop")

    assert result["status"] == STATUS_SUCCEEDED
    assert result["outputs"]["deployment:majorVersionDeployed"] == "3"
    assert result["outputs"]["deployment:aliasDeployed"] == "live"
    assert result["outputs"]["deployment:strategyUsed"] == "BlueGreenDeploymentStrategy"
    assert result["outputs"]["url"] == "http://clouddriver.test/task/op-1"

    invocation = client.invoke.await_args.args[0]
    assert invocation.qualifier == "3"
    assert invocation.function.app_name == "shop"
    promotion = client.promote.await_args.args[0]
    assert promotion.major_version == "3"
    assert promotion.minor_version is None

    lookup = client.get_revisions.await_args
    assert lookup.kwargs["should_retry"] is True
    assert lookup.kwargs["attempts"] == app_config.function_lookup_attempts


@pytest.mark.asyncio
async def test_mismatch_fails_the_stage(client, stage_context, app_config):
    client.fetch_status.return_value = succeeded('{"ok": false}')

    result = await TrafficUpdateTask(client, app_config).execute(stage_context, "shop")

    assert result["status"] == STATUS_TERMINAL
    assert "Comparison failed" in result["outputs"]["failureMessage"]
    client.promote.assert_not_called()


@pytest.mark.asyncio
async def test_unsupported_strategy(client, stage_context, app_config):
    stage_context["deploymentStrategy"] = "$CANARY"

    result = await TrafficUpdateTask(client, app_config).execute(stage_context, "shop")

    assert result["status"] == STATUS_TERMINAL
    assert "$CANARY" in result["outputs"]["failureMessage"]


@pytest.mark.asyncio
async def test_missing_timeout(client, stage_context, app_config):
    del stage_context["timeout"]

    result = await TrafficUpdateTask(client, app_config).execute(stage_context, "shop")

    assert result["status"] == STATUS_TERMINAL
    assert "timeout" in result["outputs"]["failureMessage"]
    client.invoke.assert_not_called()


@pytest.mark.asyncio
async def test_function_without_versions(client, stage_context, app_config):
    client.get_revisions.return_value = {"$LATEST": "$LATEST"}

    result = await TrafficUpdateTask(client, app_config).execute(stage_context, "shop")

    assert result["status"] == STATUS_TERMINAL
    assert "not resolvable" in result["outputs"]["failureMessage"]


@pytest.mark.asyncio
async def test_function_lookup_failure(client, stage_context, app_config):
    client.get_revisions.side_effect = NotFoundError(message="Lambda function shop-orders-handler not found.")

    result = await TrafficUpdateTask(client, app_config).execute(stage_context, "shop")

    assert result["status"] == STATUS_TERMINAL
    assert result["outputs"]["failureMessage"] == "Deployment failed: Lambda function shop-orders-handler not found."


@pytest.mark.asyncio
async def test_verification_without_url(client):
    result = await TrafficUpdateVerificationTask(client).execute({})

    assert result["status"] == STATUS_TERMINAL
    assert result["outputs"]["failureMessage"] == "No task url to verify"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_or_error, expected", [
    (running(), STATUS_RUNNING),
    (TransientStatusError("502"), STATUS_RUNNING),
    (failed("alias update rejected"), STATUS_TERMINAL),
    (APIError("Verifying task failed: 403", status_code=403), STATUS_TERMINAL),
    (TaskStatusError(TASK_URL, 403, error_body="denied"), STATUS_TERMINAL),
])
async def test_verification_statuses(client, status_or_error, expected):
    if isinstance(status_or_error, Exception):
        client.fetch_status.side_effect = status_or_error
    else:
        client.fetch_status.return_value = status_or_error

    result = await TrafficUpdateVerificationTask(client).execute({"url": TASK_URL})

    assert result["status"] == expected
    client.fetch_status.assert_awaited_once_with(TaskHandle(url=TASK_URL))


@pytest.mark.asyncio
async def test_verification_success_copies_deployment_outputs(client):
    context = {
        "url": TASK_URL,
        "deployment:majorVersionDeployed": "3",
        "deployment:aliasDeployed": "live",
        "timeout": 30,
    }

    result = await TrafficUpdateVerificationTask(client).execute(context)

    assert result["status"] == STATUS_SUCCEEDED
    assert result["outputs"] == {"deployment:majorVersionDeployed": "3", "deployment:aliasDeployed": "live"}
    assert client.fetch_status.return_value.status is TaskStatus.SUCCEEDED


@pytest.mark.asyncio
@pytest.mark.parametrize("document", [
    {"status": "RUNNING"},
    {"status": {"completed": True, "failed": False}, "resultObjects": ["done"]},
])
async def test_verification_of_unreadable_task_document_checks_again(document):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=document))
    async with CloudDriverClient(base_url="http://clouddriver.test", transport=transport) as real_client:
        result = await TrafficUpdateVerificationTask(real_client).execute({"url": TASK_URL})

    assert result["status"] == STATUS_RUNNING
