from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

_DOTENV_LOADED = False

# insights_service/config.py -> repo root is one level up
DEFAULT_DOTENV = Path(__file__).resolve().parents[1] / ".env"


def _parse_env_line(raw_line: str) -> Optional[tuple[str, str]]:
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None
    line = line.removeprefix("export ").strip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        value = value[1:-1]
    return key, value


def load_dotenv(path: str | Path = DEFAULT_DOTENV) -> dict[str, str]:
    """
    Copy KEY=VALUE pairs from a .env file into os.environ.

    Variables already set in the environment are left alone. Returns the keys
    that were set.
    """
    dotenv_path = Path(path).expanduser()
    if not dotenv_path.exists():
        return {}
    if dotenv_path.is_dir():
        raise RuntimeError(f".env path is a directory: {dotenv_path}")

    loaded: dict[str, str] = {}
    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        parsed = _parse_env_line(raw_line)
        if parsed is None:
            continue
        key, value = parsed
        if key in os.environ:
            continue
        os.environ[key] = value
        loaded[key] = value
    return loaded


def ensure_dotenv_loaded() -> None:
    global _DOTENV_LOADED
    if not _DOTENV_LOADED:
        load_dotenv()
        _DOTENV_LOADED = True


@dataclass(frozen=True)
class Settings:
    base_url: str
    host: str = "0.0.0.0"
    port: int = 5000
    storage_file: str = "session_storage.json"
    couch_url: Optional[str] = None
    couch_db: str = "sessions"
    insights_url: Optional[str] = None
    insights_username: Optional[str] = None
    insights_password: Optional[str] = None
    insights_language: str = "en"
    request_timeout_s: float = 30.0


def _vcap_credentials(vcap: Mapping[str, Any], service: str) -> dict[str, Any]:
    entries = vcap.get(service)
    if not entries:
        return {}
    if not isinstance(entries, list) or not isinstance(entries[0], dict):
        raise ValueError(f"VCAP_SERVICES entry {service!r} must be a list of service objects")
    credentials = entries[0].get("credentials") or {}
    if not isinstance(credentials, dict):
        raise ValueError(f"VCAP_SERVICES {service!r} credentials must be an object")
    return credentials


def parse_vcap_services(raw: Optional[str]) -> dict[str, Any]:
    """
    Pull service credentials out of a Cloud Foundry VCAP_SERVICES blob.

    Only the Cloudant and Personality Insights bindings are read. Returns the
    subset of Settings fields they provide.
    """
    if not raw:
        return {}
    try:
        vcap = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in VCAP_SERVICES: {e}") from e
    if not isinstance(vcap, dict):
        raise ValueError("Expected top-level JSON object in VCAP_SERVICES")

    found: dict[str, Any] = {}
    cloudant = _vcap_credentials(vcap, "cloudantNoSQLDB")
    if cloudant.get("url"):
        found["couch_url"] = cloudant["url"]

    insights = _vcap_credentials(vcap, "personality_insights")
    for src, dst in (("url", "insights_url"), ("username", "insights_username"), ("password", "insights_password")):
        if insights.get(src):
            found[dst] = insights[src]
    return found


def parse_vcap_application(raw: Optional[str]) -> Optional[str]:
    """Public URL of a Cloud Foundry app: https plus its first bound route, as cfenv does."""
    if not raw:
        return None
    try:
        app_info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in VCAP_APPLICATION: {e}") from e
    if not isinstance(app_info, dict):
        raise ValueError("Expected top-level JSON object in VCAP_APPLICATION")

    uris = app_info.get("application_uris") or []
    if not isinstance(uris, list) or not all(isinstance(u, str) for u in uris):
        raise ValueError("VCAP_APPLICATION application_uris must be a list of strings")
    return f"https://{uris[0]}" if uris else None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment; explicit variables win over the VCAP_* blobs."""
    if environ is None:
        ensure_dotenv_loaded()
        environ = os.environ

    def get(key: str) -> Optional[str]:
        value = environ.get(key, "").strip()
        return value or None

    try:
        port = int(get("PORT") or 5000)
        timeout_s = float(get("REQUEST_TIMEOUT_S") or 30.0)
    except ValueError as e:
        raise ValueError(f"Invalid numeric setting: {e}") from e

    values: dict[str, Any] = parse_vcap_services(get("VCAP_SERVICES"))
    explicit = {
        "couch_url": get("COUCHDB_URL"),
        "insights_url": get("PERSONALITY_INSIGHTS_URL"),
        "insights_username": get("PERSONALITY_INSIGHTS_USERNAME"),
        "insights_password": get("PERSONALITY_INSIGHTS_PASSWORD"),
    }
    values.update({k: v for k, v in explicit.items() if v is not None})

    base_url = (
        get("APP_BASE_URL")
        or parse_vcap_application(get("VCAP_APPLICATION"))
        or f"http://localhost:{port}"
    )

    return Settings(
        base_url=base_url.rstrip("/"),
        host=get("HOST") or "0.0.0.0",
        port=port,
        storage_file=get("SESSION_STORAGE_FILE") or "session_storage.json",
        couch_db=get("COUCHDB_NAME") or "sessions",
        insights_language=get("PERSONALITY_INSIGHTS_LANGUAGE") or "en",
        request_timeout_s=timeout_s,
        **values,
    )
