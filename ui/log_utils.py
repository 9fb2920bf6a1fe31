"""Shared logging utilities."""

import json
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit
from uuid import uuid4

from core.request_types import UpstreamTarget

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "gateway.log"


def write_incoming_log(
    method: str,
    path: str,
    headers: dict[str, str],
    body: Any,
    *,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single incoming request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "path": path,
        "headers": _redact_headers(headers),
        "body": body,
    }
    return _write_json(log_root / "incoming", payload)


def write_upstream_log(
    route: str,
    target: UpstreamTarget,
    *,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single outbound request log entry with secrets masked."""
    payload = asdict(target)
    payload["headers"] = _redact_headers(target.headers)
    payload["url"] = mask_url(target.url) if route == "webhook" else target.url
    payload["timestamp"] = _utc_now()
    payload["route"] = route
    return _write_json(log_root / route, payload)


def write_cli_log(
    level: str,
    message: str,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    CLI_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with CLI_LOG_FILE.open("a") as f:
        f.write(line)


def clear_logs(log_root: Path = LOG_ROOT) -> int:
    """Delete JSON request logs from previous runs; the CLI log is kept."""
    if not log_root.exists():
        return 0
    deleted = 0
    for old_file in log_root.glob("*/*.json"):
        try:
            old_file.unlink()
            deleted += 1
        except OSError:
            pass
    return deleted


def mask_url(url: str) -> str:
    """Keep scheme and host, mask the path (webhook URLs embed their secret there)."""
    parts = urlsplit(url)
    if not parts.netloc:
        return mask(url)
    return f"{parts.scheme}://{parts.netloc}/{mask(parts.path.lstrip('/'))}"


def mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if "key" in key.lower() or "authorization" in key.lower() or "cookie" in key.lower():
            redacted[key] = mask(value)
        else:
            redacted[key] = value
    return redacted


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
