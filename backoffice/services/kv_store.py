"""
Key-value store over the kv_store table.

There are no secondary indexes: membership of a collection is
tracked by a separate "<name>:list" record holding the ordered
ids. Mutating such a list is a read-modify-write, so the list
row is loaded FOR UPDATE and the change lands in the same
transaction as the record it indexes. The caller controls the
commit.
"""

import copy
import secrets
import time
from typing import Any, Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from backoffice.models.kv_entry import KVEntry


def new_record_id(*parts: str) -> str:
    """Time-ordered id: "<epoch millis>[_<part>...]_<random>"."""
    pieces = [str(int(time.time() * 1000)), *parts, secrets.token_hex(5)]
    return "_".join(pieces)


class KeyValueStore:

    def __init__(self, db: Session):
        self.db = db

    def _entry(self, key: str, for_update: bool = False) -> KVEntry | None:
        if for_update:
            return self.db.get(KVEntry, key, with_for_update=True)
        return self.db.get(KVEntry, key)

    def get(self, key: str, default: Any = None, for_update: bool = False) -> Any:
        """
        Return a copy of the value stored under key.

        The copy matters: JSON columns do not track in-place
        mutation, so callers must write changes back with set().
        """
        entry = self._entry(key, for_update=for_update)
        if entry is None or entry.value is None:
            return default
        return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any) -> None:
        entry = self._entry(key)
        if entry is None:
            self.db.add(KVEntry(key=key, value=copy.deepcopy(value)))
        else:
            entry.value = copy.deepcopy(value)
        self.db.flush()

    def delete(self, key: str) -> None:
        entry = self._entry(key)
        if entry is not None:
            self.db.delete(entry)
            self.db.flush()

    def mget(self, keys: list[str]) -> list[Any]:
        """Values aligned with keys; absent keys come back as None."""
        if not keys:
            return []
        rows = self.db.execute(
            select(KVEntry).where(KVEntry.key.in_(keys))
        ).scalars().all()
        found = {row.key: row.value for row in rows}
        return [copy.deepcopy(found.get(key)) for key in keys]

    def mdel(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        # "evaluate" removes matching rows from the identity map too,
        # so a later get() in the same session sees them as gone.
        self.db.execute(
            delete(KVEntry).where(KVEntry.key.in_(keys)),
            execution_options={"synchronize_session": "evaluate"},
        )

    # --- Membership lists ---

    def get_list(self, key: str, for_update: bool = False) -> list:
        value = self.get(key, default=[], for_update=for_update)
        return list(value) if isinstance(value, list) else []

    def append_to_list(self, key: str, item: Any, at_head: bool = False) -> list:
        items = self.get_list(key, for_update=True)
        if at_head:
            items.insert(0, item)
        else:
            items.append(item)
        self.set(key, items)
        return items

    def remove_from_list(self, key: str, items: Iterable[Any]) -> list:
        doomed = list(items)
        current = self.get_list(key, for_update=True)
        remaining = [item for item in current if item not in doomed]
        if len(remaining) != len(current):
            self.set(key, remaining)
        return remaining
