# ==========================
# 📁 lambdaroute/sdk/exceptions.py
# ==========================
from typing import Optional

class CloudDriverSDKError(Exception):
    """Base exception for failures talking to clouddriver."""
    def __init__(self, message: str, status_code: Optional[int] = None, error_body: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_body = error_body

    def __str__(self):
        details = f" (HTTP {self.status_code})" if self.status_code else ""
        if self.error_body:
            details += f": {self.error_body[:200]}"
        return f"{self.message}{details}"

class APIError(CloudDriverSDKError):
    """Clouddriver rejected or failed a request."""
    pass

class AuthenticationError(CloudDriverSDKError):
    """Clouddriver refused the caller's credentials for the account (401/403)."""
    def __init__(self, message: str = "Clouddriver refused the request. Check account credentials.", status_code: int = 401, error_body: Optional[str] = None):
        super().__init__(message, status_code, error_body)

class NotFoundError(CloudDriverSDKError):
    """Raised when a clouddriver resource is not found (404)."""
    def __init__(self, message: str = "Resource not found.", status_code: int = 404, error_body: Optional[str] = None):
        super().__init__(message, status_code, error_body)

class RequestTimeoutError(APIError):
    """Clouddriver did not answer within the client timeout."""
    def __init__(self, message: str = "Request timed out.", status_code: int = 408, error_body: Optional[str] = None):
        super().__init__(message, status_code, error_body)

class OperationNotAcceptedError(APIError):
    """An ops endpoint answered without the resourceUri of a task to follow."""
    def __init__(self, operation: str, response_summary: str = ""):
        super().__init__(f"Clouddriver did not accept {operation}: no task resourceUri in response {response_summary}".rstrip())
        self.operation = operation

class TaskStatusError(APIError):
    """The status of a clouddriver task was refused (4xx); checking again will not help."""
    def __init__(self, task_url: str, status_code: int, error_body: Optional[str] = None):
        super().__init__(f"Verifying task {task_url} failed", status_code=status_code, error_body=error_body)
        self.task_url = task_url

class FunctionNotFoundError(NotFoundError):
    """No Lambda function of that name is known to clouddriver in the account and region."""
    def __init__(self, function_name: str, account: str, region: str):
        super().__init__(f"Lambda function {function_name} not found in {account}/{region}.")
        self.function_name = function_name
        self.account = account
        self.region = region

class ArtifactNotFoundError(NotFoundError):
    """The artifact store has nothing at the referenced location."""
    def __init__(self, reference: str, error_body: Optional[str] = None):
        super().__init__(f"Artifact {reference} not found.", error_body=error_body)
        self.reference = reference
