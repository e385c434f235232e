# =====================
# 📁 lambdaroute/sdk/client.py
# =====================
import os
import json
import asyncio
import httpx
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

from lambdaroute.core.exceptions import ArtifactFetchError, TransientStatusError
from lambdaroute.interfaces.types.deployment import (
    ArtifactReference,
    FunctionIdentity,
    InvocationRequest,
    PromotionRequest,
    RevisionSet,
)
from lambdaroute.interfaces.types.task import TaskHandle, TaskOutcome, TaskStatus
from lambdaroute.shared.app_config import (
    DEFAULT_FUNCTION_LOOKUP_ATTEMPTS,
    DEFAULT_FUNCTION_LOOKUP_DELAY_SECONDS,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
)
from .exceptions import (
    APIError,
    ArtifactNotFoundError,
    AuthenticationError,
    CloudDriverSDKError,
    FunctionNotFoundError,
    NotFoundError,
    OperationNotAcceptedError,
    RequestTimeoutError,
    TaskStatusError,
)
from .models import CloudDriverOperationResponse, CloudDriverTaskResults, LambdaFunctionDescription

logger = logging.getLogger(__name__)

INVOKE_LAMBDA_FUNCTION_PATH = "/aws/ops/invokeLambdaFunction"
UPDATE_LAMBDA_ALIAS_PATH = "/aws/ops/updateLambdaFunctionAlias"
FUNCTIONS_PATH = "/functions"
ARTIFACT_FETCH_PATH = "/artifacts/fetch/"


def qualified_function_name(identity: FunctionIdentity) -> str:
    """Lambda functions created by a pipeline carry the '<app>-' prefix."""
    if not identity.app_name:
        return identity.function_name
    prefix = f"{identity.app_name}-"
    if identity.function_name.startswith(prefix):
        return identity.function_name
    return f"{prefix}{identity.function_name}"


def parse_task_results(results: CloudDriverTaskResults) -> TaskOutcome:
    """
    Maps a clouddriver task document onto a TaskOutcome. A document whose
    status node or first result object is not an object is unreadable and
    raises TransientStatusError.
    """
    status_node = results.get("status") or {}
    if not isinstance(status_node, dict):
        raise TransientStatusError(f"Task document carries an unreadable status node: {str(status_node)[:100]}")
    completed = bool(status_node.get("completed"))
    failed = bool(status_node.get("failed"))
    if not completed:
        status = TaskStatus.RUNNING
    elif failed:
        status = TaskStatus.FAILED
    else:
        status = TaskStatus.SUCCEEDED

    payload: Optional[str] = None
    error_message: Optional[str] = None
    result_objects = results.get("resultObjects") or []
    if isinstance(result_objects, list) and result_objects:
        first = result_objects[0] or {}
        if not isinstance(first, dict):
            raise TransientStatusError(f"Task document carries an unreadable result object: {str(first)[:100]}")
        raw_payload = first.get("responseString", first.get("body", first.get("response")))
        if raw_payload is not None:
            payload = raw_payload if isinstance(raw_payload, str) else json.dumps(raw_payload)
        error_message = first.get("errorMessage")
        if not error_message and isinstance(first.get("error"), dict):
            error_message = first["error"].get("message")

    errors = results.get("errors")
    if errors:
        if isinstance(errors, dict):
            error_message = errors.get("message") or json.dumps(errors)
        elif isinstance(errors, list):
            error_message = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
        else:
            error_message = str(errors)

    return TaskOutcome(status=status, result_payload=payload, error_message=error_message)


class CloudDriverClient:
    """
    Async clouddriver client. Implements the DeployBackend, StatusFetcher and
    ArtifactFetcher interfaces used by the blue/green orchestrator.
    """

    def __init__(self,
                 base_url: Optional[str] = None,
                 timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        """
        :param base_url: Base URL of clouddriver. Falls back to CLOUDDRIVER_BASE_URL.
        :param timeout: Request timeout in seconds.
        :param transport: Optional httpx transport (tests use httpx.MockTransport).
        :param sleep: Coroutine used between function lookup attempts.
        """
        self.base_url = (base_url or os.getenv("CLOUDDRIVER_BASE_URL") or "").rstrip("/")
        if not self.base_url:
            err_msg = "Clouddriver base_url must be provided or set via CLOUDDRIVER_BASE_URL environment variable."
            logger.critical(err_msg)
            raise ValueError(err_msg)

        self._sleep = sleep
        self.http_client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        logger.info(f"CloudDriverClient initialized for base URL: {self.base_url}")

    async def close(self):
        if self.http_client:
            await self.http_client.aclose()
            logger.info("CloudDriverClient HTTP client closed.")

    async def __aenter__(self) -> "CloudDriverClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, endpoint: str, json_data: Optional[Any] = None, params: Optional[Dict] = None) -> Any:
        try:
            logger.debug(f"Clouddriver Request: {method} {endpoint} - Params: {params} - JSON: {str(json_data)[:200]}...")
            response = await self.http_client.request(method, endpoint, json=json_data, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            error_body_text = e.response.text
            logger.error(f"Error calling clouddriver: {e.response.status_code} {e.request.url}. Response: {error_body_text[:500]}")
            if e.response.status_code in (401, 403):
                raise AuthenticationError(status_code=e.response.status_code, error_body=error_body_text) from e
            if e.response.status_code == 404:
                raise NotFoundError(status_code=e.response.status_code, error_body=error_body_text) from e
            raise APIError(message=f"Clouddriver request failed: {e.response.status_code}", status_code=e.response.status_code, error_body=error_body_text) from e
        except httpx.TimeoutException as e:
            logger.error(f"Request Timeout: {method} {endpoint}")
            raise RequestTimeoutError(message=f"Request to {endpoint} timed out.") from e
        except httpx.RequestError as e:
            logger.error(f"Request Error: {method} {endpoint} - {e}")
            raise APIError(message=f"Request failed: {e}") from e
        except json.JSONDecodeError as e:
            logger.error(f"JSON Decode Error: {e}. Response text: {e.doc[:500]}")
            raise CloudDriverSDKError(message=f"Failed to parse JSON response: {e}") from e

    def _task_handle(self, operation: str, response_data: CloudDriverOperationResponse) -> TaskHandle:
        if not isinstance(response_data, dict) or not response_data.get("resourceUri"):
            raise OperationNotAcceptedError(operation, str(response_data)[:200])
        return TaskHandle(url=f"{self.base_url}{response_data['resourceUri']}", task_id=response_data.get("id"))

    # --- DeployBackend ---

    async def invoke(self, request: InvocationRequest) -> TaskHandle:
        identity = request.function
        payload = {
            "appName": identity.app_name,
            "account": identity.account,
            "credentials": identity.account,
            "region": identity.region,
            "functionName": qualified_function_name(identity),
            "qualifier": request.qualifier,
            "payloadArtifact": request.payload_artifact.model_dump(by_alias=True, exclude_none=True),
        }
        logger.info(f"Clouddriver: Invoking {payload['functionName']}:{request.qualifier} in {identity.region}")
        response_data = await self._request("POST", INVOKE_LAMBDA_FUNCTION_PATH, json_data=payload)
        handle = self._task_handle("the invocation", response_data)
        logger.debug(f"Posted to clouddriver for blue/green verification: {handle.url}")
        return handle

    async def promote(self, request: PromotionRequest) -> Dict[str, Any]:
        identity = request.function
        payload = {
            "appName": identity.app_name,
            "account": identity.account,
            "credentials": identity.account,
            "region": identity.region,
            "functionName": qualified_function_name(identity),
            "aliasName": request.alias_name,
            "majorFunctionVersion": request.major_version,
            "minorFunctionVersion": request.minor_version,
            "weightToMinorFunctionVersion": request.minor_weight,
        }
        logger.info(f"Clouddriver: Routing alias '{request.alias_name}' of {payload['functionName']} to version {request.major_version}")
        response_data = await self._request("POST", UPDATE_LAMBDA_ALIAS_PATH, json_data=payload)
        result = dict(response_data) if isinstance(response_data, dict) else {"response": response_data}
        if result.get("resourceUri"):
            result["url"] = f"{self.base_url}{result['resourceUri']}"
        return result

    # --- StatusFetcher ---

    async def fetch_status(self, handle: TaskHandle) -> TaskOutcome:
        try:
            response = await self.http_client.get(handle.url)
        except httpx.TransportError as e:
            raise TransientStatusError(f"Could not reach task {handle.url}: {e}") from e

        if response.status_code >= 500:
            raise TransientStatusError(f"Task {handle.url} returned {response.status_code}")
        if response.status_code >= 400:
            raise TaskStatusError(handle.url, response.status_code, error_body=response.text)
        try:
            results = response.json()
        except json.JSONDecodeError as e:
            raise TransientStatusError(f"Task {handle.url} returned unreadable JSON: {e}") from e
        if not isinstance(results, dict):
            raise TransientStatusError(f"Task {handle.url} returned an unexpected document")
        return parse_task_results(results)

    # --- ArtifactFetcher ---

    async def fetch_artifact(self, reference: ArtifactReference) -> bytes:
        artifact = reference.model_dump(by_alias=True, exclude_none=True)
        try:
            response = await self.http_client.put(ARTIFACT_FETCH_PATH, json=artifact)
        except httpx.TransportError as e:
            raise ArtifactFetchError(f"Could not fetch artifact {reference.reference}: {e}") from e

        if response.status_code >= 500:
            raise ArtifactFetchError(f"Fetching artifact {reference.reference} returned {response.status_code}")
        if response.status_code == 404:
            raise ArtifactNotFoundError(reference.reference, error_body=response.text)
        if response.status_code >= 400:
            raise APIError(
                message=f"Fetching artifact {reference.reference} failed: {response.status_code}",
                status_code=response.status_code,
                error_body=response.text,
            )
        return response.content

    # --- Function lookup ---

    async def get_function(self, identity: FunctionIdentity) -> Optional[LambdaFunctionDescription]:
        params = {
            "region": identity.region,
            "account": identity.account,
            "functionName": qualified_function_name(identity),
        }
        try:
            response = await self.http_client.get(FUNCTIONS_PATH, params=params)
        except httpx.RequestError as e:
            logger.error(f"Error calling clouddriver to find lambda: {e}", exc_info=True)
            raise APIError(message=f"Function lookup failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Could not retrieve lambda {params['functionName']}: {response.status_code}")
            return None
        try:
            functions = response.json()
        except json.JSONDecodeError as e:
            raise CloudDriverSDKError(message=f"Failed to parse function lookup response: {e}") from e

        if isinstance(functions, dict):
            return functions
        if isinstance(functions, list) and functions:
            logger.debug(f"Found function {params['functionName']}")
            return functions[0]
        return None

    async def find_function(self,
                            identity: FunctionIdentity,
                            should_retry: bool = False,
                            attempts: int = DEFAULT_FUNCTION_LOOKUP_ATTEMPTS,
                            delay: float = DEFAULT_FUNCTION_LOOKUP_DELAY_SECONDS) -> Optional[LambdaFunctionDescription]:
        """
        Looks the function up, optionally retrying while it is not visible yet
        (a function created earlier in the same pipeline takes a while to show up).
        """
        total_attempts = 1 + (attempts if should_retry else 0)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(total_attempts),
            wait=wait_fixed(delay),
            retry=retry_if_result(lambda found: found is None),
            retry_error_callback=lambda retry_state: None,
            sleep=self._sleep,
        )
        return await retrying(self.get_function, identity)

    async def get_revisions(self, identity: FunctionIdentity, should_retry: bool = False, **lookup_kwargs) -> RevisionSet:
        function = await self.find_function(identity, should_retry=should_retry, **lookup_kwargs)
        if function is None:
            raise FunctionNotFoundError(qualified_function_name(identity), identity.account, identity.region)
        return dict(function.get("revisions") or {})
