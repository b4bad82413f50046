from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime

from secure_finance.db.core import SubcategoryDB, EntryDB
from secure_finance.crud.base import OwnedRepository, check_batch
from secure_finance.models.entry import EntryCreate, EntryUpdate, EntryPatch, EntryBulkItem
from secure_finance.models.user import UserPrincipal


# ===== UTILITY FUNCTIONS =====

def creation_timestamp() -> bytes:
    """Server-side creation time, stored as the bytes of its text form"""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f").encode("utf-8")


class EntryRepository(OwnedRepository[EntryDB]):

    def _before_insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        values['creation_time'] = creation_timestamp()
        return values


entries = EntryRepository(
    EntryDB,
    label="Entry",
    opaque_fields=("name", "description", "amount", "time_of_expense", "attachment"),
    mutable_fields=("subcategory_id", "name", "description", "amount", "time_of_expense", "attachment"),
    required_fields=("subcategory_id", "amount", "time_of_expense"),
    parent_field="subcategory_id",
    parent_model=SubcategoryDB,
    parent_label="Subcategory",
)


# ===== DATABASE OPERATIONS =====

def create_db_entry(db: Session, principal: UserPrincipal, subcategory_id: int, entry_data: EntryCreate) -> EntryDB:
    """Create a new entry inside one of the principal's subcategories"""
    return entries.create(db, principal, entry_data.model_dump(), parent_id=subcategory_id)


def bulk_create_db_entries(db: Session, principal: UserPrincipal, subcategory_id: int,
                           items: List[EntryBulkItem]) -> List[Tuple[EntryDB, Optional[int]]]:
    return entries.create_many(
        db, principal,
        [(item.model_dump(exclude={"mobile_id"}), item.mobile_id) for item in items],
        parent_id=subcategory_id
    )


def read_db_entries(db: Session, principal: UserPrincipal, subcategory_id: int,
                    skip: int = 0, limit: int = 100) -> List[EntryDB]:
    return entries.read_all(db, principal, parent_id=subcategory_id, skip=skip, limit=limit)


def read_db_entry(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int) -> Optional[EntryDB]:
    return entries.read(db, principal, entry_id, parent_id=subcategory_id)


def update_db_entry(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int,
                    entry: EntryUpdate) -> int:
    """Replace every mutable field of an entry; creation_time is kept"""
    return entries.update(db, principal, entry_id, entry.model_dump(), parent_id=subcategory_id)


def patch_db_entry(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int,
                   entry_updates: EntryPatch) -> int:
    return entries.update_fields(db, principal, entry_id, entry_updates.model_dump(exclude_unset=True),
                                 parent_id=subcategory_id)


def update_db_entry_name(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int,
                         name: Optional[str]) -> int:
    return entries.update_field(db, principal, entry_id, "name", name, parent_id=subcategory_id)


def update_db_entry_description(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int,
                                description: Optional[str]) -> int:
    return entries.update_field(db, principal, entry_id, "description", description, parent_id=subcategory_id)


def update_db_entry_amount(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int,
                           amount: str) -> int:
    return entries.update_field(db, principal, entry_id, "amount", amount, parent_id=subcategory_id)


def update_db_entry_time_of_expense(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int,
                                    time_of_expense: str) -> int:
    return entries.update_field(db, principal, entry_id, "time_of_expense", time_of_expense, parent_id=subcategory_id)


def update_db_entry_attachment(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int,
                               attachment: Optional[str]) -> int:
    return entries.update_field(db, principal, entry_id, "attachment", attachment, parent_id=subcategory_id)


def update_db_entry_subcategory(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int,
                                new_subcategory_id: int) -> int:
    """Move an entry to another of the principal's subcategories"""
    return entries.update_field(db, principal, entry_id, "subcategory_id", new_subcategory_id, parent_id=subcategory_id)


def delete_db_entry(db: Session, principal: UserPrincipal, subcategory_id: int, entry_id: int) -> int:
    return entries.delete(db, principal, entry_id, parent_id=subcategory_id)


# ===== BATCH OPERATIONS =====

def patch_db_entries(db: Session, principal: UserPrincipal, subcategory_ids: List[int], entry_ids: List[int],
                     entry_updates: List[EntryPatch]) -> List[EntryDB]:
    """Partially update several entries, each addressed by its subcategory id and entry id"""
    check_batch(subcategory_ids, entry_ids, items=entry_updates)
    return entries.update_many(db, principal, [
        (entry_id, subcategory_id, updates.model_dump(exclude_unset=True))
        for subcategory_id, entry_id, updates in zip(subcategory_ids, entry_ids, entry_updates)
    ])


def delete_db_entries(db: Session, principal: UserPrincipal, subcategory_ids: List[int],
                      entry_ids: List[int]) -> List[int]:
    check_batch(subcategory_ids, entry_ids)
    return entries.delete_many(db, principal, [
        (entry_id, subcategory_id) for subcategory_id, entry_id in zip(subcategory_ids, entry_ids)
    ])
