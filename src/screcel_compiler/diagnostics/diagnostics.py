"""
Structured diagnostics for the screcel pipeline.

Every event has a stable code, a severity and a rendered message, plus the
structured fields (block id, target name, opcode...) it was reported with.
Events are formatted by a pluggable formatter and handed to a sink; they are
also kept on the Diagnostics object so callers and tests can inspect them.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Any, Optional, List
import json
import os
import sys

from .codes import Code, Codes, Severity, codes as default_codes

# Structured keys copied from the report kwargs into the event
EVENT_FIELDS = ("loc", "attr", "symbol", "name", "op", "reason", "node", "target", "extra")


def _format_human(evt: Dict[str, Any]) -> str:
    """[ts] SEVERITY CODE (target @ node): message"""
    where = [part for part in (evt.get("target"), evt.get("node")) if part]
    where_str = f" ({' @ '.join(where)})" if where else ""
    return f"[{evt['ts']}] {evt['severity']} {evt['code']}{where_str}: {evt['message']}"


def _format_json(evt: Dict[str, Any]) -> str:
    return json.dumps(evt, ensure_ascii=False)


def console_sink(line: str, stream=None) -> None:
    stream = stream or sys.stderr
    stream.write(line + "\n")
    stream.flush()


FORMATTERS: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "human": _format_human,
    "json": _format_json,
}


@dataclass
class DiagnosticsConfig:
    """Set up by the CLI (or a test) before the pipeline runs."""
    formatter: Callable[[Dict[str, Any]], str] = _format_human
    sink: Callable[[str], None] = console_sink
    attach_process_info: bool = True
    codes: Codes = default_codes


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Diagnostics:
    """
    Structured diagnostics with stable codes and pluggable sinks.

    Example:
        diag = Diagnostics()
        diag.report(diag.codes.DANGLING_POINTER, node="a", attr="next",
                    symbol="ghost", target="Sprite1")
    """

    def __init__(self, config: Optional[DiagnosticsConfig] = None):
        self.config = config or DiagnosticsConfig()
        self.codes = self.config.codes
        self.events: List[Dict[str, Any]] = []

    @classmethod
    def collecting(cls) -> "Diagnostics":
        """Diagnostics that only records events (nothing is written)."""
        return cls(DiagnosticsConfig(sink=lambda line: None, attach_process_info=False))

    def info(self, code: Code, *, msg: Optional[str] = None, **kwargs):
        self._emit(code, Severity.INFO, msg, kwargs)

    def warn(self, code: Code, *, msg: Optional[str] = None, **kwargs):
        self._emit(code, Severity.WARN, msg, kwargs)

    def error(self, code: Code, *, msg: Optional[str] = None, **kwargs):
        self._emit(code, Severity.ERROR, msg, kwargs)

    def report(self, code: Code, *, msg: Optional[str] = None, **kwargs):
        """Emit with the code's default severity."""
        self._emit(code, code.severity, msg, kwargs)

    def codes_emitted(self) -> List[str]:
        return [evt["code"] for evt in self.events]

    def _emit(self, code: Code, level: Severity, msg: Optional[str], kv: Dict[str, Any]):
        if msg is not None:
            message = msg
        else:
            try:
                message = code.template.format(**kv)
            except KeyError as e:
                # template placeholder not supplied by the caller
                message = f"{code.template} (missing: {str(e).strip(chr(39))})"

        evt: Dict[str, Any] = {
            "ts": _timestamp(),
            "code": code.id,
            "severity": level.name,
            "message": message,
        }
        evt.update({key: kv[key] for key in EVENT_FIELDS if kv.get(key) is not None})
        if self.config.attach_process_info:
            evt["pid"] = os.getpid()

        self.events.append(evt)
        self.config.sink(self.config.formatter(evt))

    def with_config(self, **overrides) -> "Diagnostics":
        """Child diagnostics with a different formatter/sink; events are not shared."""
        cfg = DiagnosticsConfig(
            formatter=overrides.get("formatter", self.config.formatter),
            sink=overrides.get("sink", self.config.sink),
            attach_process_info=overrides.get("attach_process_info", self.config.attach_process_info),
            codes=self.config.codes,
        )
        return Diagnostics(cfg)
