"""
Logging configuration for the PlutusScan service.

Log lines are JSON objects (or plain text for local runs). Registry audit
events go through the "plutusscan.audit" logger with their fields attached,
so they can be filtered from ordinary service logs.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TextIO

request_id_var: ContextVar[str] = ContextVar('request_id', default='')

AUDIT_LOGGER_NAME = "plutusscan.audit"


class StructuredFormatter(logging.Formatter):
    """One JSON object per line; audit fields are merged in at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        audit = getattr(record, "audit", None)
        if audit:
            entry.update(audit)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class RegistryAuditLogger:
    """
    Audit events for registry encoding and resolution.

    Records what was encoded or resolved and why input was refused. Raw
    parameter values are never logged, only their kinds and counts.
    """

    def __init__(self, name: str = AUDIT_LOGGER_NAME):
        self._logger = logging.getLogger(name)

    def _event(self, level: int, event_type: str, message: str, **fields) -> None:
        self._logger.log(level, "%s: %s", event_type, message, extra={"audit": {"event_type": event_type, **fields}})

    def metadata_encoded(self, commit_hash: str, script_count: int, size_bytes: int, chunk_count: int) -> None:
        self._event(
            logging.INFO, "METADATA_ENCODED",
            f"{size_bytes} bytes in {chunk_count} chunks for commit {commit_hash}",
            commit_hash=commit_hash,
            script_count=script_count,
            size_bytes=size_bytes,
            chunk_count=chunk_count,
        )

    def resolution_completed(
        self,
        validator_count: int,
        converged: bool,
        passes_used: int,
        warnings: Optional[List[str]] = None,
    ) -> None:
        state = "converged" if converged else "did not converge"
        self._event(
            logging.INFO if converged else logging.WARNING, "RESOLUTION_COMPLETED",
            f"{validator_count} validators, {state} after {passes_used} passes",
            validator_count=validator_count,
            converged=converged,
            passes_used=passes_used,
            warnings=warnings or [],
        )

    def parameter_rejected(self, kind: str, reason: str) -> None:
        self._event(logging.WARNING, "PARAMETER_REJECTED", kind, kind=kind, reason=reason)

    def rate_limit_exceeded(self, client_id: str, endpoint: str) -> None:
        self._event(
            logging.WARNING, "RATE_LIMIT_EXCEEDED",
            f"{client_id} on {endpoint}",
            client_id=client_id,
            endpoint=endpoint,
        )


def configure_logging(level: str = "INFO", json_format: bool = True, stream: Optional[TextIO] = None) -> None:
    """
    Install a single handler on the root logger.

    Args:
        level: Log level name; unknown names fall back to INFO
        json_format: JSON lines via StructuredFormatter, else plain text
        stream: Output stream, stdout by default
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request id to the current context, generating one if needed."""
    request_id = request_id or uuid.uuid4().hex
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str:
    return request_id_var.get()


audit_log = RegistryAuditLogger()
