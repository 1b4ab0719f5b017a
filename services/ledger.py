import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol
from utils.logger import get_logger

logger = get_logger(__name__)


class OrderLedger(Protocol):
    """
    Durable local queue of orders, used when the database cannot be reached.

    Implementations may be backed by a file, memory or an embedded store;
    callers only rely on put/get/list.
    """

    def put(self, order: dict) -> int: ...

    def get(self, order_id) -> Optional[dict]: ...

    def list(self) -> list[dict]: ...


def _stamp(order: dict) -> dict:
    """Fill in the fields every locally created order carries."""
    entry = dict(order)
    entry["id"] = int(time.time() * 1000)
    entry["status"] = entry.get("status") or "pending"
    entry.setdefault("created_at", datetime.now(timezone.utc).isoformat())
    entry["isLocal"] = True
    return entry


class JsonFileLedger:
    """
    Orders kept as one JSON array in a single file.

    Every put rewrites the whole file through a temporary sibling that is
    renamed into place, so readers see either the old or the new array.
    There is no size cap, expiry or locking between processes; concurrent
    writers race and the last write wins.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> list[dict]:
        """
        Read the stored array.

        An absent or blank file is an empty ledger. Malformed or non-array
        content raises ValueError; read errors propagate.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []

        if not raw.strip():
            return []

        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, found {type(data).__name__}")

        return [entry for entry in data if isinstance(entry, dict)]

    def _quarantine(self) -> Path:
        """Move unparseable content aside so a write never discards it."""
        backup = self.path.with_name(f"{self.path.name}.corrupt-{int(time.time() * 1000)}")
        self.path.replace(backup)
        return backup

    def _write(self, orders: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(orders, ensure_ascii=False, default=str), encoding="utf-8")
        tmp.replace(self.path)

    def list(self) -> list[dict]:
        """
        Return the stored orders.

        Absent, unreadable or malformed content yields an empty list.
        """
        try:
            return self._load()
        except OSError as e:
            logger.warning(
                "Local ledger unreadable",
                extra={"path": str(self.path), "error": str(e)}
            )
        except ValueError as e:
            logger.warning(
                "Local ledger contains malformed content",
                extra={"path": str(self.path), "error": str(e)}
            )
        return []

    def get(self, order_id) -> Optional[dict]:
        for entry in self.list():
            if str(entry.get("id")) == str(order_id):
                return entry
        return None

    def put(self, order: dict) -> int:
        """
        Append one order.

        Malformed existing content is moved to a ``.corrupt-<millis>`` file
        next to the ledger before the new array is written. Read and write
        errors propagate to the caller.
        """
        entry = _stamp(order)
        try:
            orders = self._load()
        except ValueError as e:
            backup = self._quarantine()
            logger.error(
                "Local ledger was malformed; moved aside before writing",
                extra={"path": str(self.path), "backup": str(backup), "error": str(e)}
            )
            orders = []

        orders.append(entry)
        self._write(orders)

        logger.info(
            "Order saved to local ledger",
            extra={"order_id": entry["id"], "ledger_size": len(orders)}
        )
        return entry["id"]


class MemoryLedger:
    """In-process ledger with the same contract as JsonFileLedger."""

    def __init__(self, orders: Optional[list] = None):
        self._orders = list(orders or [])

    def list(self) -> list[dict]:
        return [dict(entry) for entry in self._orders]

    def get(self, order_id) -> Optional[dict]:
        for entry in self._orders:
            if str(entry.get("id")) == str(order_id):
                return dict(entry)
        return None

    def put(self, order: dict) -> int:
        entry = _stamp(order)
        self._orders.append(entry)
        return entry["id"]
