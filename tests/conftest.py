import pytest

from lambdaroute.interfaces.types.deployment import ArtifactReference, DeploymentRequest, FunctionIdentity
from lambdaroute.shared.app_config import AppConfig

from fakes import RecordingSleep


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def app_config() -> AppConfig:
    config = AppConfig()
    config.poll_interval_seconds = 10.0
    config.artifact_fetch_attempts = 10
    config.artifact_fetch_delay_seconds = 0.2
    config.artifact_fetch_exponential = False
    config.artifact_fetch_timeout_seconds = 60.0
    config.function_lookup_attempts = 5
    config.function_lookup_delay_seconds = 0.0
    return config


@pytest.fixture
def function_identity() -> FunctionIdentity:
    return FunctionIdentity(function_name="orders-handler", account="aws-prod", region="us-west-2", app_name="shop")


@pytest.fixture
def deployment_request(function_identity: FunctionIdentity) -> DeploymentRequest:
    return DeploymentRequest(
        function=function_identity,
        alias_name="live",
        major_version="2",
        major_weight=1.0,
        minor_version="3",
        minor_weight=0.0,
        output_artifact=ArtifactReference(reference="s3://bucket/expected.json", type="s3/object"),
        payload_artifact=ArtifactReference(reference="s3://bucket/payload.json", type="s3/object"),
        timeout_seconds=30,
        latest_version_qualifier="3",
    )
