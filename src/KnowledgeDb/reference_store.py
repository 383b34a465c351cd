"""Reference table stores consumed by the lookup processor and validator."""
import threading
from typing import Any, Dict, List, Optional, Protocol

from src.CustomLogger.custom_logger import CustomLogger
from src.utils.reference_utils import as_rows

logger = CustomLogger().custlogger(loglevel='WARNING')


class ReferenceStore(Protocol):
    def get_reference_rows(self, reference_id: str) -> Optional[List[Any]]:
        ...


class InMemoryReferenceStore:
    """
    Dict-backed reference store.

    Tables are snapshotted on registration; replacing a table swaps the whole
    list, so readers holding the previous rows are never affected.
    """

    def __init__(self, tables: Optional[Dict[str, Any]] = None):
        self._lock = threading.Lock()
        self._tables: Dict[str, List[Any]] = {}
        for ref_id, table in (tables or {}).items():
            self.put(ref_id, table)

    def put(self, reference_id: str, table: Any) -> None:
        rows = as_rows(table)
        with self._lock:
            self._tables[reference_id] = rows
        logger.info(f"[ReferenceStore] Registered '{reference_id}' ({len(rows)} rows)")

    def remove(self, reference_id: str) -> bool:
        with self._lock:
            return self._tables.pop(reference_id, None) is not None

    def has(self, reference_id: str) -> bool:
        return reference_id in self._tables

    def get_reference_rows(self, reference_id: str) -> Optional[List[Any]]:
        rows = self._tables.get(reference_id)
        if rows is None:
            logger.warning(f"[ReferenceStore] Unknown reference '{reference_id}'")
        return rows
