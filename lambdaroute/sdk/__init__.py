import logging

# --- Core SDK Components ---
from .client import CloudDriverClient, parse_task_results, qualified_function_name
from .exceptions import (
    CloudDriverSDKError, APIError, AuthenticationError,
    NotFoundError, RequestTimeoutError, OperationNotAcceptedError,
    TaskStatusError, FunctionNotFoundError, ArtifactNotFoundError
)
from .models import (
    CloudDriverOperationResponse, CloudDriverTaskStatusNode, CloudDriverInvokeResult,
    CloudDriverTaskResults, LambdaFunctionDescription
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CloudDriverClient",
    "parse_task_results",
    "qualified_function_name",
    "CloudDriverSDKError",
    "APIError",
    "AuthenticationError",
    "NotFoundError",
    "RequestTimeoutError",
    "OperationNotAcceptedError",
    "TaskStatusError",
    "FunctionNotFoundError",
    "ArtifactNotFoundError",
    "CloudDriverOperationResponse",
    "CloudDriverTaskStatusNode",
    "CloudDriverInvokeResult",
    "CloudDriverTaskResults",
    "LambdaFunctionDescription",
]
