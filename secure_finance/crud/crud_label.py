from sqlalchemy.orm import Session
from typing import List, Optional, Tuple

from secure_finance.db.core import LabelDB
from secure_finance.crud.base import OwnedRepository, check_batch
from secure_finance.models.label import LabelCreate, LabelUpdate, LabelPatch, LabelBulkItem
from secure_finance.models.user import UserPrincipal

labels = OwnedRepository(
    LabelDB,
    label="Label",
    opaque_fields=("name", "description"),
    mutable_fields=("name", "description", "colour_id"),
    required_fields=("name", "colour_id"),
)


def create_db_label(db: Session, principal: UserPrincipal, label_data: LabelCreate) -> LabelDB:
    """Create a new label"""
    return labels.create(db, principal, label_data.model_dump())


def bulk_create_db_labels(db: Session, principal: UserPrincipal,
                          items: List[LabelBulkItem]) -> List[Tuple[LabelDB, Optional[int]]]:
    return labels.create_many(db, principal, [(item.model_dump(exclude={"mobile_id"}), item.mobile_id) for item in items])


def read_db_labels(db: Session, principal: UserPrincipal, skip: int = 0, limit: int = 100) -> List[LabelDB]:
    """Read all labels for a user"""
    return labels.read_all(db, principal, skip=skip, limit=limit)


def read_db_label(db: Session, principal: UserPrincipal, label_id: int) -> Optional[LabelDB]:
    """Read a label by ID"""
    return labels.read(db, principal, label_id)


def update_db_label(db: Session, principal: UserPrincipal, label_id: int, label: LabelUpdate) -> int:
    return labels.update(db, principal, label_id, label.model_dump())


def patch_db_label(db: Session, principal: UserPrincipal, label_id: int, label_updates: LabelPatch) -> int:
    return labels.update_fields(db, principal, label_id, label_updates.model_dump(exclude_unset=True))


def update_db_label_name(db: Session, principal: UserPrincipal, label_id: int, name: str) -> int:
    return labels.update_field(db, principal, label_id, "name", name)


def update_db_label_description(db: Session, principal: UserPrincipal, label_id: int, description: Optional[str]) -> int:
    return labels.update_field(db, principal, label_id, "description", description)


def update_db_label_colour(db: Session, principal: UserPrincipal, label_id: int, colour_id: int) -> int:
    return labels.update_field(db, principal, label_id, "colour_id", colour_id)


def delete_db_label(db: Session, principal: UserPrincipal, label_id: int) -> int:
    """Delete a label; its entry links cascade"""
    return labels.delete(db, principal, label_id)


# ===== BATCH OPERATIONS =====

def patch_db_labels(db: Session, principal: UserPrincipal, label_ids: List[int],
                    label_updates: List[LabelPatch]) -> List[LabelDB]:
    """Partially update several labels; updates are matched to ids by position"""
    check_batch(label_ids, items=label_updates)
    return labels.update_many(db, principal, [
        (label_id, None, updates.model_dump(exclude_unset=True))
        for label_id, updates in zip(label_ids, label_updates)
    ])


def delete_db_labels(db: Session, principal: UserPrincipal, label_ids: List[int]) -> List[int]:
    check_batch(label_ids)
    return labels.delete_many(db, principal, [(label_id, None) for label_id in label_ids])
