"""
timingsafe.environment
----------------------

Host snapshot attached to timing reports.

CPU frequency scaling and scheduling noise are not corrected for; recording
the host state next to each report is what makes two runs comparable after
the fact. Every probe is best-effort: a failing probe is logged and left out.
"""

from __future__ import annotations

import logging
import platform
import sys
from typing import Any, Dict

import psutil

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def snapshot() -> Dict[str, Any]:
    """Collect interpreter and CPU details. Never call inside a timed window."""
    env: Dict[str, Any] = {
        "python": platform.python_version(),
        "implementation": sys.implementation.name,
        "machine": platform.machine(),
        "system": platform.system(),
    }
    try:
        env["cpu_count"] = psutil.cpu_count(logical=True)
    except Exception as e:
        logger.debug("cpu_count probe failed: %s", e)
    try:
        freq = psutil.cpu_freq()
        if freq is not None:
            env["cpu_freq_mhz"] = freq.current
    except Exception as e:
        logger.debug("cpu_freq probe failed: %s", e)
    try:
        # Not available on macOS.
        env["cpu_affinity"] = psutil.Process().cpu_affinity()
    except Exception as e:
        logger.debug("cpu_affinity probe failed: %s", e)
    return env
