# ==========================
# 📁 lambdaroute/sdk/models.py
# ==========================
# Wire shapes of the clouddriver endpoints used by the client.
from typing import TypedDict, List, Dict, Any, Optional

class CloudDriverOperationResponse(TypedDict):
    id: str
    resourceUri: str

class CloudDriverTaskStatusNode(TypedDict, total=False):
    phase: str
    status: str
    completed: bool
    failed: bool
    retryable: bool

class CloudDriverInvokeResult(TypedDict, total=False):
    body: Any
    responseString: str
    errorMessage: Optional[str]
    hasErrors: bool
    invokeResult: Dict[str, Any]

class CloudDriverTaskResults(TypedDict, total=False):
    id: str
    status: CloudDriverTaskStatusNode
    resultObjects: List[CloudDriverInvokeResult]
    errors: Any

class LambdaFunctionDescription(TypedDict, total=False):
    functionName: str
    functionArn: str
    account: str
    region: str
    revisions: Dict[str, str]
    aliasConfigurations: List[Dict[str, Any]]
