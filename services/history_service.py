# catalog_dashboard/services/history_service.py
import logging

from services.models import HistoryAction, HistoryLogEntry, new_id, parse_timestamp, utc_now_iso

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100
CATEGORY_MARKER = "CATEGORY"
IMPORT_MARKER = "EXCEL"

ACTION_LABELS = {
    HistoryAction.ADD: "Added product",
    HistoryAction.EDIT: "Edited product",
    HistoryAction.DELETE: "Deleted product",
    HistoryAction.ADD_CATEGORY: "Added category",
    HistoryAction.DELETE_CATEGORY: "Deleted category",
    HistoryAction.IMPORT: "Excel import",
}


def make_entry(username, action, target_name, target_code, now=None) -> HistoryLogEntry:
    return HistoryLogEntry(
        id=new_id(),
        username=username,
        action=HistoryAction.parse(action),
        target_name=target_name or "",
        target_code=target_code or "",
        timestamp=now or utc_now_iso(),
    )


def recent(entries, limit=HISTORY_LIMIT):
    """Newest first, capped at `limit`."""
    ordered = sorted(entries, key=lambda e: parse_timestamp(e.timestamp), reverse=True)
    return ordered[:limit]


def record(backend, username, action, target_name, target_code):
    entry = make_entry(username, action, target_name, target_code)
    backend.insert_history(entry.to_record(include_id=False))
    logger.info(f"History: {username} {entry.action.value} {target_name} ({target_code}).")
    return entry


def load_history(backend, limit=HISTORY_LIMIT):
    entries = []
    for row in backend.list_history(limit=limit):
        try:
            entries.append(HistoryLogEntry.from_record(row))
        except ValueError as e:
            logger.warning(f"Skipping unreadable history row {row.get('id')}: {e}")
    return recent(entries, limit)
