"""
Bank service: the banks bank deposits are recorded against.

Banks live together in "banks:list". A bank referenced by any
bank deposit (through its bankId) cannot be deleted.
"""

from sqlalchemy.orm import Session

from backoffice.exceptions import ConflictError, InvalidInputError, NotFoundError
from backoffice.models.enums import ActivityAction
from backoffice.schemas.role import BankCreate, BankUpdate
from backoffice.services.activity_service import ActivityLog
from backoffice.services.deposit_service import BANK_DEPOSITS, DepositService
from backoffice.services.kv_store import KeyValueStore, new_record_id
from backoffice.time_utils import now_iso

BANKS_LIST_KEY = "banks:list"


class BankService:

    def __init__(self, db: Session):
        self.db = db
        self.store = KeyValueStore(db)
        self.activity_log = ActivityLog(self.store)

    def list_banks(self, for_update: bool = False) -> list[dict]:
        return self.store.get_list(BANKS_LIST_KEY, for_update=for_update)

    @staticmethod
    def _name_taken(banks: list[dict], name: str, exclude_id: str | None = None) -> bool:
        lowered = name.lower()
        return any(
            b.get("name", "").lower() == lowered and b.get("id") != exclude_id
            for b in banks
        )

    @staticmethod
    def _index_of(banks: list[dict], bank_id: str) -> int:
        for i, bank in enumerate(banks):
            if bank.get("id") == bank_id:
                return i
        raise NotFoundError("Bank not found")

    def create_bank(self, caller, request: BankCreate, ip_address: str | None = None) -> dict:
        name = request.bank_name
        banks = self.list_banks(for_update=True)
        if self._name_taken(banks, name):
            raise InvalidInputError("Bank with this name already exists")

        bank = {
            "id": new_record_id(),
            "name": name,
            "createdAt": now_iso(),
            "createdBy": caller.id,
            "createdByName": caller.name,
        }
        banks.append(bank)
        self.store.set(BANKS_LIST_KEY, banks)

        self.activity_log.record(
            caller.id, caller.name, ActivityAction.ADD_BANK,
            f"Created new bank: {name}", "", ip_address,
        )
        return bank

    def update_bank(self, caller, bank_id: str, request: BankUpdate, ip_address: str | None = None) -> dict:
        name = request.bank_name
        banks = self.list_banks(for_update=True)
        index = self._index_of(banks, bank_id)
        if self._name_taken(banks, name, exclude_id=bank_id):
            raise InvalidInputError("Bank with this name already exists")

        old_name = banks[index]["name"]
        banks[index] = {
            **banks[index],
            "name": name,
            "updatedAt": now_iso(),
            "updatedBy": caller.id,
            "updatedByName": caller.name,
        }
        self.store.set(BANKS_LIST_KEY, banks)

        self.activity_log.record(
            caller.id, caller.name, ActivityAction.EDIT_BANK,
            f"Updated bank: {old_name} → {name}", "", ip_address,
        )
        return banks[index]

    def delete_bank(self, caller, bank_id: str, ip_address: str | None = None) -> None:
        banks = self.list_banks(for_update=True)
        index = self._index_of(banks, bank_id)
        bank_name = banks[index]["name"]

        transactions = DepositService(self.db, BANK_DEPOSITS).all_records()
        if any(t.get("bankId") == bank_id for t in transactions):
            raise ConflictError("Cannot delete bank that has transactions")

        banks.pop(index)
        self.store.set(BANKS_LIST_KEY, banks)

        self.activity_log.record(
            caller.id, caller.name, ActivityAction.DELETE_BANK,
            f"Deleted bank: {bank_name}", "", ip_address,
        )
