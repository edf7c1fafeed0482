from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

import boto3

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_NON_RETRIABLE_ERROR_CODES = {
    "AccessDenied",
    "AccessDeniedException",
    "ResourceNotFound",
    "ResourceNotFoundException",
    "ValidationException",
    "InvalidArgumentException",
    "ExpiredIteratorException",
}
_NON_RETRIABLE_ERROR_PREFIXES = ("AccessDenied", "ResourceNotFound")
_NON_RETRIABLE_MESSAGE_MARKERS = (
    "access denied",
    "resource not found",
    "validation",
)


class KinesisClient(Protocol):
    def put_record(
        self,
        *,
        StreamName: str,
        Data: bytes,
        PartitionKey: str,
    ) -> dict[str, Any]:
        ...

    def list_shards(self, **kwargs: Any) -> dict[str, Any]:
        ...

    def get_shard_iterator(
        self,
        *,
        StreamName: str,
        ShardId: str,
        ShardIteratorType: str,
    ) -> dict[str, Any]:
        ...

    def get_records(self, *, ShardIterator: str, Limit: int) -> dict[str, Any]:
        ...


def create_kinesis_client(*, region_name: str | None = None) -> KinesisClient:
    return boto3.client("kinesis", region_name=region_name)


async def call_with_retries(
    fn: Callable[[], T],
    *,
    operation: str,
    max_attempts: int,
    base_delay_ms: int,
    max_delay_ms: int,
) -> T:
    """Run a blocking Kinesis call in a worker thread, retrying transient failures.

    Non-retriable errors and the final failed attempt re-raise the original
    exception.
    """
    if max_attempts <= 0:
        raise ValueError("max_attempts must be > 0")

    attempt = 1
    while True:
        try:
            return await asyncio.to_thread(fn)
        except Exception as exc:
            error_code, error_message = _extract_exception_error(exc)
            if _is_non_retriable_error(code=error_code, message=error_message):
                LOGGER.error(
                    "kinesis_request_non_retriable",
                    extra={
                        "operation": operation,
                        "attempt": attempt,
                        "error_code": error_code,
                    },
                )
                raise

            if attempt >= max_attempts:
                LOGGER.error(
                    "kinesis_request_retry_exhausted",
                    extra={
                        "operation": operation,
                        "attempt": attempt,
                        "error_code": error_code,
                    },
                )
                raise

            LOGGER.warning(
                "kinesis_request_failed",
                extra={
                    "operation": operation,
                    "attempt": attempt,
                    "error_code": error_code,
                },
            )

        await asyncio.sleep(_retry_delay(attempt - 1, base_delay_ms, max_delay_ms))
        attempt += 1


def _retry_delay(attempt: int, base_delay_ms: int, max_delay_ms: int) -> float:
    exponential = min(max_delay_ms / 1000.0, (base_delay_ms / 1000.0) * (2**attempt))
    return exponential * random.uniform(0.8, 1.2)


def _extract_exception_error(exc: Exception) -> tuple[str | None, str | None]:
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        error = response.get("Error")
        if isinstance(error, dict):
            code = error.get("Code")
            message = error.get("Message")
            return (
                str(code) if code is not None else None,
                str(message) if message is not None else None,
            )

    return None, str(exc)


def _is_non_retriable_error(*, code: str | None, message: str | None) -> bool:
    normalized_code = code.strip() if code else None
    if normalized_code:
        if normalized_code in _NON_RETRIABLE_ERROR_CODES:
            return True
        if any(normalized_code.startswith(prefix) for prefix in _NON_RETRIABLE_ERROR_PREFIXES):
            return True

    message_lc = message.lower() if message else ""
    return any(marker in message_lc for marker in _NON_RETRIABLE_MESSAGE_MARKERS)
