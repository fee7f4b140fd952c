"""
Account registry: staff records and their membership list.

Accounts live at "staff:<id>" and "staff:list" holds the ids in
signup order. Anything that needs "all accounts" goes through
here rather than touching the keys directly.
"""

from backoffice.services.kv_store import KeyValueStore

STAFF_LIST_KEY = "staff:list"


def staff_key(account_id: str) -> str:
    return f"staff:{account_id}"


class AccountRegistry:

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self, account_id: str) -> dict | None:
        return self.store.get(staff_key(account_id))

    def save(self, account: dict) -> None:
        self.store.set(staff_key(account["id"]), account)

    def ids(self, for_update: bool = False) -> list[str]:
        return self.store.get_list(STAFF_LIST_KEY, for_update=for_update)

    def is_empty(self, lock: bool = False) -> bool:
        """
        True when no account has ever been registered (or all were
        removed). With lock=True the membership row stays locked
        until the caller's transaction ends, so two concurrent
        signups cannot both see an empty registry.
        """
        return len(self.ids(for_update=lock)) == 0

    def is_sole_member(self, account_id: str) -> bool:
        ids = self.ids()
        return len(ids) == 1 and ids[0] == account_id

    def add(self, account: dict) -> None:
        self.save(account)
        self.store.append_to_list(STAFF_LIST_KEY, account["id"])

    def remove(self, account_id: str) -> None:
        self.store.delete(staff_key(account_id))
        self.store.remove_from_list(STAFF_LIST_KEY, [account_id])

    def all(self) -> list[dict]:
        ids = self.ids()
        return [a for a in self.store.mget([staff_key(i) for i in ids]) if a]

    def find_by_email(self, email: str) -> dict | None:
        wanted = email.strip().lower()
        for account in self.all():
            if (account.get("email") or "").lower() == wanted:
                return account
        return None

    def with_role(self, role_name: str) -> list[dict]:
        return [a for a in self.all() if a.get("role") == role_name]
