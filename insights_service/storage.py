"""
Session storage: the last submitted text and analysis response per session id.

Two backends share one interface: a JSON file for local runs and a
CouchDB/Cloudant database for deployments.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


def _timestamp() -> str:
    return datetime.now().strftime("%m/%d/%Y, %I:%M:%S %p")


@dataclass
class SessionRecord:
    session_id: str
    content: str
    response: str
    created: str

    def to_doc(self) -> dict[str, Any]:
        return {
            "sessionID": self.session_id,
            "content": self.content,
            "response": self.response,
            "created": self.created,
        }

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> SessionRecord:
        return cls(
            session_id=str(doc.get("sessionID", "")),
            content=str(doc.get("content", "")),
            response=str(doc.get("response", "")),
            created=str(doc.get("created", "")),
        )


class SessionStore(Protocol):
    def get_record(self, session_id: str) -> Optional[SessionRecord]: ...

    def save_record(self, session_id: str, content: str, response: str) -> SessionRecord: ...

    def delete_record(self, session_id: str) -> None: ...


def get_response(store: SessionStore, session_id: str) -> Optional[str]:
    """Stored analysis JSON for a session, or None when nothing was saved."""
    record = store.get_record(session_id)
    if record is None or not record.response:
        return None
    return record.response


class SessionStorage:
    """
    Simple file-based storage keyed by session id.

    Safe to share between request threads. Each save rewrites the whole file
    through a temp file and os.replace, so a crash never leaves it half written.
    """

    def __init__(self, storage_file: str = "session_storage.json"):
        self.storage_file = Path(storage_file)
        self._lock = threading.Lock()
        self._data = self._load()

    def _load(self) -> dict:
        if self.storage_file.exists():
            if self.storage_file.is_dir():
                return {}
            try:
                with open(self.storage_file, 'r') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning("Ignoring unreadable session file %s: %s", self.storage_file, e)
                return {}
            return data if isinstance(data, dict) else {}
        return {}

    def _save(self):
        if self.storage_file.exists() and self.storage_file.is_dir():
            raise StorageError(f"Storage path {self.storage_file} is a directory, not a file")
        directory = self.storage_file.parent
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{self.storage_file.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.storage_file)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get_record(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            doc = self._data.get(session_id)
        if not isinstance(doc, dict):
            return None
        return SessionRecord.from_doc(doc)

    def save_record(self, session_id: str, content: str, response: str) -> SessionRecord:
        """Replace whatever was stored for this session."""
        record = SessionRecord(session_id=session_id, content=content, response=response, created=_timestamp())
        with self._lock:
            self._data[session_id] = record.to_doc()
            self._save()
        return record

    def delete_record(self, session_id: str) -> None:
        with self._lock:
            if session_id in self._data:
                del self._data[session_id]
                self._save()


class CouchSessionStorage:
    """Session documents in a CouchDB (or Cloudant) database, one doc per session id."""

    def __init__(
        self,
        server_url: str,
        db_name: str = "sessions",
        *,
        timeout_s: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not server_url:
            raise ValueError("server_url is required")
        self.server_url = server_url.rstrip("/")
        self.db_name = db_name
        self.timeout_s = timeout_s
        self._session = session or requests.Session()

    @property
    def db_url(self) -> str:
        return f"{self.server_url}/{quote(self.db_name, safe='')}"

    def _doc_url(self, session_id: str) -> str:
        return f"{self.db_url}/{quote(session_id, safe='')}"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self._session.request(method, url, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            raise StorageError(f"Failed to reach session database: {e}") from e

    def ensure_database(self) -> None:
        response = self._request("PUT", self.db_url)
        if response.status_code == 412:
            logger.info("Session database %r already exists", self.db_name)
            return
        if response.status_code >= 400:
            raise StorageError(f"Could not create database {self.db_name!r}: HTTP {response.status_code}")
        logger.info("Created session database %r", self.db_name)

    def _get_doc(self, session_id: str) -> Optional[dict[str, Any]]:
        response = self._request("GET", self._doc_url(session_id))
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise StorageError(f"Fetching session {session_id!r} failed: HTTP {response.status_code}")
        try:
            doc = response.json()
        except ValueError as e:
            raise StorageError(f"Session {session_id!r} is not valid JSON") from e
        return doc if isinstance(doc, dict) else None

    def get_record(self, session_id: str) -> Optional[SessionRecord]:
        doc = self._get_doc(session_id)
        return SessionRecord.from_doc(doc) if doc is not None else None

    def save_record(self, session_id: str, content: str, response: str) -> SessionRecord:
        record = SessionRecord(session_id=session_id, content=content, response=response, created=_timestamp())
        doc = record.to_doc()
        existing = self._get_doc(session_id)
        if existing and existing.get("_rev"):
            doc["_rev"] = existing["_rev"]

        result = self._request("PUT", self._doc_url(session_id), json=doc)
        if result.status_code >= 400:
            raise StorageError(f"Saving session {session_id!r} failed: HTTP {result.status_code}")
        return record

    def delete_record(self, session_id: str) -> None:
        existing = self._get_doc(session_id)
        if not existing or not existing.get("_rev"):
            return
        result = self._request("DELETE", self._doc_url(session_id), params={"rev": existing["_rev"]})
        if result.status_code >= 400 and result.status_code != 404:
            raise StorageError(f"Deleting session {session_id!r} failed: HTTP {result.status_code}")


def open_storage(settings, *, session: Optional[requests.Session] = None) -> SessionStore:
    """
    Couch when a database URL is configured, the JSON file otherwise.

    A database that cannot be created or reached at startup is logged and the
    store is returned anyway; requests then fail through StorageError.
    """
    if settings.couch_url:
        store = CouchSessionStorage(
            settings.couch_url, settings.couch_db, timeout_s=settings.request_timeout_s, session=session
        )
        try:
            store.ensure_database()
        except StorageError as e:
            logger.error("Could not establish connection to session database: %s", e)
        return store
    return SessionStorage(settings.storage_file)
