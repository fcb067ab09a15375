"""
Invocation tracing for the pure calculation engines.

``@traced_engine`` wraps an engine function and emits one DEBUG record per
call (``engine_invocation``) with the engine name and version, a short
fingerprint of selected keyword inputs and the elapsed wall time. The
engines themselves stay free of logging concerns.

Fingerprints hash a canonical JSON rendering of the chosen kwargs: mapping
keys are sorted, sequences keep their order, values JSON cannot represent
natively (Decimal, UUID, datetime, dataclasses) are stringified, and absent
kwargs count as ``null``.
"""

from __future__ import annotations

import functools
import hashlib
import json
import time
from collections.abc import Callable
from typing import Any

from ledger_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

FINGERPRINT_LENGTH = 16


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    selected = {name: kwargs.get(name) for name in fingerprint_fields}
    canonical = json.dumps(selected, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Args:
        engine_name: Engine identifier, e.g. "aggregation".
        engine_version: Version of the calculation, bumped when results change.
        fingerprint_fields: Keyword argument names hashed into the
            ``input_fingerprint``; empty means no fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            _logger.debug(
                "engine_invocation",
                extra={
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "function": func.__qualname__,
                    "input_fingerprint": (
                        compute_input_fingerprint(fingerprint_fields, kwargs)
                        if fingerprint_fields
                        else ""
                    ),
                    "duration_ms": round(elapsed_ms, 3),
                },
            )
            return result

        return wrapper

    return decorator
