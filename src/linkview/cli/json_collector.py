# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/cli/json_collector.py

import sys
from datetime import datetime, UTC
from typing import Any

import orjson


class JSONCollector:
    """Collects structured data from CLI commands for scripting.

    When enabled, captures operation results and metadata as JSON.
    When disabled, all methods are no-ops.
    """

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self.data: dict[str, Any] = {}

    def capture_success(self, result: Any) -> None:
        """Capture successful operation data.

        Args:
            result: Dict returned by the command handler
        """
        if not self.enabled:
            return

        self.data["status"] = "success"
        self.data["timestamp"] = datetime.now(UTC).isoformat()
        if isinstance(result, dict):
            self.data.update(result)
        elif result is not None:
            self.data["result"] = result

    def capture_error(self, error: BaseException) -> None:
        if not self.enabled:
            return

        self.data["status"] = "error"
        self.data["timestamp"] = datetime.now(UTC).isoformat()
        self.data["error"] = str(error)
        self.data["error_type"] = type(error).__name__

    def output(self) -> None:
        """Write collected JSON data to stdout if enabled."""
        if not self.enabled:
            return

        payload = orjson.dumps(self.data, option=orjson.OPT_INDENT_2, default=str)
        sys.stdout.write(payload.decode("utf-8") + "\n")
        sys.stdout.flush()
