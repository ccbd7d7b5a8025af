"""Storage operation timing utilities.

Times and logs object store calls so every read, write and delete is
reported with the same structured fields.
"""

import time
from contextlib import contextmanager
from typing import Any, Generator

import logfire


@contextmanager
def timed_operation(
    operation_name: str,
    **log_context: Any,
) -> Generator[None, None, None]:
    """
    Context manager for timing and logging storage operations.

    Logs the start of the operation, and on completion logs either success
    with elapsed time or error details if an exception occurred. The
    exception is re-raised.

    Args:
        operation_name: Name of the storage operation (e.g., "object_store_get")
        **log_context: Additional context to include in all log messages

    Example:
        with timed_operation("object_store_get", key=key):
            data = bucket.download(key)
    """
    start_time = time.time()

    logfire.debug(
        f"Starting {operation_name}",
        operation=operation_name,
        **log_context,
    )

    try:
        yield
        elapsed = time.time() - start_time
        logfire.info(
            f"{operation_name} completed",
            operation=operation_name,
            response_time_ms=elapsed * 1000,
            **log_context,
        )
    except Exception as e:
        elapsed = time.time() - start_time
        logfire.error(
            f"{operation_name} failed",
            operation=operation_name,
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=elapsed * 1000,
            **log_context,
        )
        raise
