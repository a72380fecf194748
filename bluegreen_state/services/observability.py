from __future__ import annotations

from datetime import datetime, timezone
import json
import logging


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def configure_logging(level: int = logging.INFO) -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=level, format="%(message)s")


def emit_structured_log(
    *,
    component: str,
    event: str,
    level: int = logging.INFO,
    deployment_key: str | None = None,
    table_name: str | None = None,
    run_id: str | None = None,
    **fields,
) -> None:
    payload: dict[str, object | None] = {
        "timestamp_utc": _utcnow_iso(),
        "component": component,
        "event": event,
        "deployment_key": deployment_key,
        "table_name": table_name,
        "run_id": run_id,
    }
    payload.update(fields)
    logging.getLogger(component).log(level, json.dumps(payload, sort_keys=True, default=str))
