"""Error report payloads persisted after a run cannot complete."""

from __future__ import annotations

import platform
import resource
import sys
import traceback
from typing import Any


def build_error_report(error: BaseException, timestamp: str) -> dict[str, Any]:
    """Describe a terminal run error together with a snapshot of the host environment."""
    return {
        "timestamp": timestamp,
        "error": str(error),
        "error_type": type(error).__name__,
        "stack": "".join(traceback.format_exception(error)),
        "environment": {
            "python_version": platform.python_version(),
            "platform": sys.platform,
            "memory_usage": {
                "max_rss_kb": resource.getrusage(resource.RUSAGE_SELF).ru_maxrss,
            },
        },
    }
