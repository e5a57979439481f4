"""JSON-file document store for chatbots."""

from __future__ import annotations

import json
import logging
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from exceptions import StoreError

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatbotStore:
    """Chatbot documents keyed by id, persisted as one JSON file.

    Writes go through a temp file and an atomic replace, serialised with a
    lock. Reads always hit the file so several processes see each other's
    writes (last write wins).
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    # ----- file I/O -----

    def _load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read chatbot store %s: %s", self.path, exc)
            raise StoreError(f"Failed to read chatbot store: {exc}") from exc

    def _save(self, docs: dict[str, dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, suffix=".tmp", prefix="chatbots_"
            )
        except OSError as exc:
            logger.error("Failed to write chatbot store %s: %s", self.path, exc)
            raise StoreError(f"Failed to write chatbot store: {exc}") from exc
        try:
            with open(tmp_fd, "w", encoding="utf-8") as f:
                json.dump(docs, f, indent=2, ensure_ascii=False)
                f.write("\n")
            Path(tmp_path).replace(self.path)
        except OSError as exc:
            Path(tmp_path).unlink(missing_ok=True)
            logger.error("Failed to write chatbot store %s: %s", self.path, exc)
            raise StoreError(f"Failed to write chatbot store: {exc}") from exc

    # ----- documents -----

    def get(self, chatbot_id: str) -> dict[str, Any] | None:
        return self._load().get(chatbot_id)

    def list_for_user(self, user_id: str) -> list[dict[str, Any]]:
        """All chatbots owned by user_id, most recently updated first."""
        docs = [d for d in self._load().values() if d.get("userId") == user_id]
        return sorted(docs, key=lambda d: d.get("updatedAt") or "", reverse=True)

    def create(
        self, user_id: str, name: str, settings: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        now = utc_now()
        doc = {
            "id": uuid.uuid4().hex,
            "name": name,
            "userId": user_id,
            "createdAt": now,
            "updatedAt": now,
            "settings": settings or {},
        }
        with self._lock:
            docs = self._load()
            docs[doc["id"]] = doc
            self._save(docs)
        logger.info("Created chatbot '%s' for user '%s'", doc["id"], user_id)
        return doc

    def update(self, chatbot_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Shallow-merge fields into a document; returns None if it does not exist."""
        with self._lock:
            docs = self._load()
            doc = docs.get(chatbot_id)
            if doc is None:
                return None
            protected = {"id", "userId", "createdAt"}
            doc.update({k: v for k, v in fields.items() if k not in protected})
            doc["updatedAt"] = utc_now()
            self._save(docs)
        return doc

    def update_settings(
        self, chatbot_id: str, setting_type: str, settings: Any
    ) -> dict[str, Any] | None:
        """Replace one section of a chatbot's settings."""
        with self._lock:
            docs = self._load()
            doc = docs.get(chatbot_id)
            if doc is None:
                return None
            doc.setdefault("settings", {})[setting_type] = settings
            doc["updatedAt"] = utc_now()
            self._save(docs)
        return doc

    def delete(self, chatbot_id: str) -> bool:
        with self._lock:
            docs = self._load()
            if docs.pop(chatbot_id, None) is None:
                return False
            self._save(docs)
        logger.info("Deleted chatbot '%s'", chatbot_id)
        return True
