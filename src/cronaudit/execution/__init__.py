"""Execution package public API.

- ExecutionWrapper: times one firing, classifies it, retries, writes one audit record.
- RetryController / RetryPolicy / RetryOutcome: bounded fixed-delay retry loop.
- LifecycleEvents: success / failure / complete notifications.
"""

from .events import (
    CompleteEvent,
    FailureEvent,
    LifecycleEvents,
    SuccessEvent,
)
from .retry import RetryController, RetryOutcome, RetryPolicy
from .wrapper import ExecutionWrapper, describe_error

__all__ = [
    "ExecutionWrapper",
    "describe_error",
    "RetryController",
    "RetryOutcome",
    "RetryPolicy",
    "LifecycleEvents",
    "SuccessEvent",
    "FailureEvent",
    "CompleteEvent",
]
