from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
ACCESS_DENIED_CODES = frozenset({"403", "AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"})
THROTTLED_CODES = frozenset({"429", "SlowDown", "Throttling", "ThrottlingException", "RequestLimitExceeded"})


class BucketFileSystemError(Exception):
    error_type = "UNKNOWN"


class ObjectNotFoundError(BucketFileSystemError):
    error_type = "NOT_FOUND"

    def __init__(self, key: str):
        super().__init__(f"Object not found: {key}")
        self.key = key


class BatchDeleteError(BucketFileSystemError):
    error_type = "BATCH_DELETE"

    def __init__(self, failed_keys: list[tuple[str, str, str]]):
        keys = ", ".join(key for key, _code, _message in failed_keys[:5])
        super().__init__(f"Failed to delete {len(failed_keys)} object(s): {keys}")
        self.failed_keys = failed_keys


class ConfigurationError(BucketFileSystemError, ValueError):
    error_type = "CONFIGURATION"


def client_error_code(error: Exception) -> str:
    response = getattr(error, "response", None) or {}
    return str((response.get("Error") or {}).get("Code") or "")


def is_not_found(error: Exception) -> bool:
    if isinstance(error, ObjectNotFoundError):
        return True
    return isinstance(error, ClientError) and client_error_code(error) in NOT_FOUND_CODES


def classify_error(error: Exception) -> str:
    if hasattr(error, "error_type"):
        return getattr(error, "error_type")

    if isinstance(error, ClientError):
        code = client_error_code(error)
        if code in NOT_FOUND_CODES:
            return "NOT_FOUND"
        if code in ACCESS_DENIED_CODES:
            return "ACCESS_DENIED"
        if code in THROTTLED_CODES:
            return "THROTTLED"
        return "TRANSPORT"

    return "UNKNOWN"


def describe_client_error(error: Exception) -> dict[str, Any]:
    """Diagnostic fields attached to a storage-service failure, for logging."""
    response = getattr(error, "response", None) or {}
    details = response.get("Error") or {}
    metadata = response.get("ResponseMetadata") or {}
    return {
        "error_type": classify_error(error),
        "code": details.get("Code"),
        "message": details.get("Message") or str(error),
        "request_id": metadata.get("RequestId"),
        "host_id": metadata.get("HostId"),
    }
