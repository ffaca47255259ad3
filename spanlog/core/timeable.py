"""
Task duration tracking.

``TaskTimer`` records how long a unit of work takes into a
``<service>_task_duration_ms`` histogram. Work is wrapped explicitly, either
by awaiting it through ``time_as`` or by decorating a function with
``timed``.
"""

import functools
import inspect
import time
from typing import Any, Awaitable, Callable, TypeVar

from opentelemetry import metrics

T = TypeVar("T")


class TaskTimer:
    """
    Records task execution durations in milliseconds.

    Args:
        service_name: Prefix of the histogram name
        meter: Meter to create the histogram on. Defaults to a meter from the
            global meter provider.
    """

    def __init__(self, service_name: str, meter: metrics.Meter = None):
        self.metric_name = f"{service_name}_task_duration_ms"
        meter = meter or metrics.get_meter(__name__)
        self.histogram = meter.create_histogram(
            self.metric_name,
            unit="ms",
            description="Task execution duration in milliseconds.",
        )

    def record(self, task_name: str, duration_ms: float) -> None:
        self.histogram.record(duration_ms, attributes={"task": task_name})

    async def time_as(self, awaitable: Awaitable[T], task_name: str) -> T:
        """
        Await ``awaitable`` and record its duration under ``task_name``.

        The duration is recorded whether the awaitable returns or raises;
        the result or exception is passed through unchanged.
        """
        start = time.perf_counter()
        try:
            return await awaitable
        finally:
            self.record(task_name, (time.perf_counter() - start) * 1000.0)

    def timed(self, task_name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """
        Decorator recording the duration of every call of a sync or async
        function.

        Example:
            @timer.timed("charge_card")
            async def charge(amount):
                ...
        """
        def decorator(func):
            if inspect.iscoroutinefunction(func):
                @functools.wraps(func)
                async def async_wrapper(*args, **kwargs):
                    return await self.time_as(func(*args, **kwargs), task_name)
                return async_wrapper

            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    return func(*args, **kwargs)
                finally:
                    self.record(task_name, (time.perf_counter() - start) * 1000.0)
            return wrapper
        return decorator
