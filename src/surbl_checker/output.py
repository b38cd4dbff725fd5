from __future__ import annotations

import json
import sys
from abc import ABC, abstractmethod

from .models import CheckResult, RunStats


class OutputHandler(ABC):
    @abstractmethod
    def emit_result(self, result: CheckResult) -> None: ...

    @abstractmethod
    def emit_error(self, hostname: str, error: Exception) -> None: ...

    @abstractmethod
    def emit_summary(self, stats: RunStats) -> None: ...


class StdoutHandler(OutputHandler):
    def emit_result(self, result: CheckResult) -> None:
        verdict = "spam" if result.listed else "clean"
        line = f"{result.hostname}: {verdict}"
        if result.domain:
            line += f" (checked {result.domain}, level {result.level})"
        if result.categories:
            line += f" [{', '.join(result.categories)}]"
        if result.error:
            line += f" -- lookup failed: {result.error}"
        print(line)

    def emit_error(self, hostname: str, error: Exception) -> None:
        print(f"{hostname}: error -- {error}", file=sys.stderr)

    def emit_summary(self, stats: RunStats) -> None:
        print(
            f"checked {stats.hosts_checked} host(s): {stats.listed_count} listed, "
            f"{stats.clean_count} clean, {stats.errors} error(s)"
        )


class JsonLinesHandler(OutputHandler):
    def emit_result(self, result: CheckResult) -> None:
        print(result.model_dump_json())

    def emit_error(self, hostname: str, error: Exception) -> None:
        print(json.dumps({"hostname": hostname, "error": type(error).__name__, "message": str(error)}))

    def emit_summary(self, stats: RunStats) -> None:
        print(stats.model_dump_json())
