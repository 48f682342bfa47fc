"""
JSON file store

All state lives in a single JSON document. Every operation reads the whole
document and every mutation rewrites it whole: the new content goes to a
temporary sibling file that is then moved over the old one, so a failed
write leaves the previous file in place.

Mutations go through ``JsonStore.transaction()``, which holds the store lock
for the full read, modify and write sequence.
"""
import json
import logging
import os
import threading
import time
from contextlib import contextmanager, suppress
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import config
from errors import StorageError
from schemas import Analytics, Settings, User, SEED_CATEGORIES
from security import hash_password

logger = logging.getLogger(__name__)

COLLECTIONS = ("categories", "products", "orders")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def next_id(items: List[Dict[str, Any]]) -> int:
    """Millisecond timestamp, bumped past the highest id already in use."""
    candidate = int(time.time() * 1000)
    highest = max((item["id"] for item in items if isinstance(item.get("id"), int)), default=0)
    return max(candidate, highest + 1)


def default_document() -> Dict[str, Any]:
    stamp = now_iso()
    user = User(password=hash_password(config.DEFAULT_ADMIN_PASSWORD), last_password_change=stamp)
    return {
        "settings": Settings().model_dump(by_alias=True),
        "user": user.model_dump(by_alias=True),
        "categories": [dict(category, createdAt=stamp) for category in SEED_CATEGORIES],
        "products": [],
        "orders": [],
        "analytics": Analytics().model_dump(by_alias=True),
    }


class JsonStore:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.RLock()

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored document, or None when it is missing or unusable."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.error(f"Error reading data file {self.path}: {e}")
            return None
        if not isinstance(data, dict) or not data.get("user") or not data.get("settings"):
            logger.warning(f"Invalid data structure in {self.path}")
            return None
        for name in COLLECTIONS:
            data.setdefault(name, [])
        data.setdefault("analytics", Analytics().model_dump(by_alias=True))
        return data

    def save(self, data: Dict[str, Any]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing data file {self.path}: {e}")
            with suppress(OSError):
                tmp.unlink()
            raise StorageError("Failed to write data file") from e

    def read(self) -> Dict[str, Any]:
        with self._lock:
            data = self.load()
            if data is None:
                logger.info(f"Creating initial data file at {self.path}")
                data = default_document()
                self.save(data)
            return data

    def initialize(self) -> Dict[str, Any]:
        data = self.read()
        logger.info(
            f"Data file ready at {self.path}: {len(data['categories'])} categories, "
            f"{len(data['products'])} products, {len(data['orders'])} orders"
        )
        return data

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, Any]]:
        with self._lock:
            data = self.read()
            yield data
            self.save(data)

    def reset(self) -> Dict[str, Any]:
        with self._lock:
            current = self.load() or {}
            summary = {
                "productsDeleted": len(current.get("products", [])),
                "ordersDeleted": len(current.get("orders", [])),
                "analyticsReset": True,
                "settingsReset": True,
            }
            self.save(default_document())
        logger.info(f"Data reset completed: {summary}")
        return summary

    def status(self) -> Dict[str, Any]:
        data = self.load()
        if data is None:
            return {"hasData": False, "filePath": str(self.path)}
        return {
            "hasData": True,
            "userExists": bool(data.get("user")),
            "productsCount": len(data["products"]),
            "ordersCount": len(data["orders"]),
            "categoriesCount": len(data["categories"]),
            "filePath": str(self.path),
        }


db = JsonStore(config.DATA_FILE)
