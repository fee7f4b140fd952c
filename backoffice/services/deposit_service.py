"""
Deposit service: cash/local/crypto deposits and bank deposits.

Both kinds are open JSON records owned by the account that
submitted them. They share every rule, so one service handles
both, parameterised by a RecordKind:

- admins see every record, everyone else only their own
- editing or deleting needs the matrix grant AND (admin or owner)
- the submitter fields and id are server-owned and never change
"""

from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

from backoffice.exceptions import NotFoundError
from backoffice.models.enums import Action, ActivityAction, Resource
from backoffice.services.activity_service import ActivityLog
from backoffice.services.kv_store import KeyValueStore, new_record_id
from backoffice.services.listing import matches_search, newest_first, paginate
from backoffice.time_utils import now_iso


@dataclass(frozen=True)
class RecordKind:
    resource: Resource
    key_prefix: str
    list_key: str
    noun: str
    search_fields: tuple[str, ...]
    add_action: ActivityAction
    edit_action: ActivityAction
    delete_action: ActivityAction
    describe: Callable[[dict], str]

    def key(self, record_id: str) -> str:
        return f"{self.key_prefix}:{record_id}"


DEPOSITS = RecordKind(
    resource=Resource.DEPOSITS,
    key_prefix="deposit",
    list_key="deposits:list",
    noun="deposit",
    search_fields=(
        "date", "submittedByName", "localDeposit", "usdtDeposit", "cashDeposit",
    ),
    add_action=ActivityAction.ADD_DEPOSIT,
    edit_action=ActivityAction.EDIT_DEPOSIT,
    delete_action=ActivityAction.DELETE_DEPOSIT,
    describe=lambda r: f"Date: {r.get('date')}",
)

BANK_DEPOSITS = RecordKind(
    resource=Resource.BANK_DEPOSITS,
    key_prefix="bankDeposit",
    list_key="bankDeposits:list",
    noun="bank deposit",
    search_fields=(
        "date", "submittedByName", "bankName", "accountType",
        "depositAmount", "withdrawalAmount",
    ),
    add_action=ActivityAction.ADD_BANK_DEPOSIT,
    edit_action=ActivityAction.EDIT_BANK_DEPOSIT,
    delete_action=ActivityAction.DELETE_BANK_DEPOSIT,
    describe=lambda r: f"Amount: ${r.get('amount')}",
)


class DepositService:

    def __init__(self, db: Session, kind: RecordKind):
        self.db = db
        self.kind = kind
        self.store = KeyValueStore(db)
        self.activity_log = ActivityLog(self.store)

    def all_records(self) -> list[dict]:
        ids = self.store.get_list(self.kind.list_key)
        return [r for r in self.store.mget([self.kind.key(i) for i in ids]) if r]

    def visible_to(self, caller) -> list[dict]:
        records = self.all_records()
        if caller.is_admin:
            return records
        return [r for r in records if r.get("submittedBy") == caller.id]

    def get(self, record_id: str) -> dict:
        record = self.store.get(self.kind.key(record_id))
        if record is None:
            raise NotFoundError(f"{self.kind.noun.capitalize()} not found")
        return record

    def list_records(
        self,
        caller,
        search: str = "",
        date_from: str = "",
        date_to: str = "",
        submitted_by: str = "",
        account_type: str = "",
        page: int = 1,
        limit: int = 1000,
    ) -> tuple[list[dict], dict]:
        records = [
            r for r in self.visible_to(caller)
            if matches_search(r, search, self.kind.search_fields)
        ]
        if date_from:
            records = [r for r in records if (r.get("date") or "") >= date_from]
        if date_to:
            records = [r for r in records if (r.get("date") or "") <= date_to]
        if submitted_by and caller.is_admin:
            records = [r for r in records if r.get("submittedBy") == submitted_by]
        if account_type and account_type != "all":
            records = [r for r in records if r.get("accountType") == account_type]

        return paginate(newest_first(records, "date"), page, limit)

    def create(self, caller, data: dict, ip_address: str | None = None) -> dict:
        record_id = new_record_id(caller.id)
        record = {
            **data,
            "id": record_id,
            "submittedBy": caller.id,
            "submittedByName": caller.name,
            "createdAt": now_iso(),
        }
        self.store.set(self.kind.key(record_id), record)
        self.store.append_to_list(self.kind.list_key, record_id)

        self.activity_log.record(
            caller.id, caller.name, self.kind.add_action,
            f"Added new {self.kind.noun}", self.kind.describe(record), ip_address,
        )
        return record

    def update(self, gate, caller, record_id: str, data: dict, ip_address: str | None = None) -> dict:
        existing = self.get(record_id)
        gate.require_owner_or_admin(
            caller, existing, self.kind.resource, Action.EDIT,
            f"No permission to edit this {self.kind.noun}",
        )
        updated = {
            **existing,
            **data,
            "id": record_id,
            "submittedBy": existing.get("submittedBy"),
            "submittedByName": existing.get("submittedByName"),
            "updatedAt": now_iso(),
        }
        self.store.set(self.kind.key(record_id), updated)

        self.activity_log.record(
            caller.id, caller.name, self.kind.edit_action,
            f"Updated {self.kind.noun}", self.kind.describe(updated), ip_address,
        )
        return updated

    def delete(self, gate, caller, record_id: str, ip_address: str | None = None) -> None:
        existing = self.get(record_id)
        gate.require_owner_or_admin(
            caller, existing, self.kind.resource, Action.DELETE,
            f"No permission to delete this {self.kind.noun}",
        )
        self.store.delete(self.kind.key(record_id))
        self.store.remove_from_list(self.kind.list_key, [record_id])

        self.activity_log.record(
            caller.id, caller.name, self.kind.delete_action,
            f"Deleted {self.kind.noun}", self.kind.describe(existing), ip_address,
        )
