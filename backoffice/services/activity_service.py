"""
Activity log: the audit trail of every state-changing action.

Entries are immutable. "activities:list" keeps ids most-recent
first and is capped; the overflow is evicted from the tail, and
its records deleted, inside the same request that wrote the new
entry.

record() runs in a SAVEPOINT and swallows storage errors after
logging them: a failed audit write must never undo the business
operation it describes.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from backoffice.config import get_settings
from backoffice.models.enums import ActivityAction
from backoffice.services.kv_store import KeyValueStore, new_record_id
from backoffice.time_utils import now_iso

logger = logging.getLogger(__name__)

ACTIVITIES_LIST_KEY = "activities:list"


def activity_key(activity_id: str) -> str:
    return f"activity:{activity_id}"


class ActivityLog:

    def __init__(self, store: KeyValueStore, max_entries: int | None = None):
        self.store = store
        if max_entries is None:
            max_entries = get_settings().MAX_ACTIVITY_ENTRIES
        self.max_entries = max_entries

    def _append(self, entry: dict) -> None:
        self.store.set(activity_key(entry["id"]), entry)
        ids = self.store.append_to_list(ACTIVITIES_LIST_KEY, entry["id"], at_head=True)
        if len(ids) > self.max_entries:
            evicted = ids[self.max_entries:]
            self.store.mdel([activity_key(i) for i in evicted])
            self.store.set(ACTIVITIES_LIST_KEY, ids[:self.max_entries])

    def record(
        self,
        actor_id: str,
        actor_name: str,
        action: ActivityAction | str,
        description: str,
        details: str | None = None,
        ip_address: str | None = None,
    ) -> dict | None:
        """Append an entry. Returns it, or None if the write failed."""
        entry = {
            "id": new_record_id(actor_id),
            "userId": actor_id,
            "userName": actor_name,
            "action": action.value if isinstance(action, ActivityAction) else action,
            "description": description,
            "details": details or "",
            "ipAddress": ip_address or "Unknown",
            "timestamp": now_iso(),
        }
        try:
            with self.store.db.begin_nested():
                self._append(entry)
        except SQLAlchemyError:
            logger.warning(
                "Failed to record activity %s for %s", entry["action"], actor_id,
                exc_info=True,
            )
            return None
        return entry

    def entries(self) -> list[dict]:
        ids = self.store.get_list(ACTIVITIES_LIST_KEY)
        found = [e for e in self.store.mget([activity_key(i) for i in ids]) if e]
        # Stable sort: entries sharing a timestamp keep list order
        found.sort(key=lambda e: e.get("timestamp") or "", reverse=True)
        return found

    def list_for(self, actor_id: str, see_all: bool) -> list[dict]:
        entries = self.entries()
        if see_all:
            return entries
        return [e for e in entries if e.get("userId") == actor_id]

    def delete(self, activity_ids: list[str]) -> int:
        self.store.mdel([activity_key(i) for i in activity_ids])
        self.store.remove_from_list(ACTIVITIES_LIST_KEY, activity_ids)
        return len(activity_ids)
