from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List

from secure_finance.db.core import EntryDB, LabelDB, EntryLabelDB, NotFoundError, ConflictError
from secure_finance.crud.crud_user import require_valid_credentials
from secure_finance.crud.base import check_batch
from secure_finance.models.user import UserPrincipal
from secure_finance.logging_config import get_logger

logger = get_logger(__name__)


def _verify_entry(db: Session, principal: UserPrincipal, entry_id: int) -> None:
    entry = db.query(EntryDB.id).filter(
        EntryDB.id == entry_id,
        EntryDB.user_id == principal.user_id
    ).first()
    if not entry:
        raise NotFoundError(f"Entry with id {entry_id} not found")


def _verify_label(db: Session, principal: UserPrincipal, label_id: int) -> None:
    label = db.query(LabelDB.id).filter(
        LabelDB.id == label_id,
        LabelDB.user_id == principal.user_id
    ).first()
    if not label:
        raise NotFoundError(f"Label with id {label_id} not found")


def read_db_labels_for_entry(db: Session, principal: UserPrincipal, entry_id: int) -> List[LabelDB]:
    """Get all labels attached to one of the principal's entries"""

    require_valid_credentials(db, principal)
    _verify_entry(db, principal, entry_id)

    return db.query(LabelDB).join(EntryLabelDB, EntryLabelDB.label_id == LabelDB.id).filter(
        EntryLabelDB.entry_id == entry_id,
        EntryLabelDB.user_id == principal.user_id
    ).order_by(LabelDB.id).all()


def read_db_entries_for_label(db: Session, principal: UserPrincipal, label_id: int) -> List[EntryDB]:
    """Get all entries carrying one of the principal's labels"""

    require_valid_credentials(db, principal)
    _verify_label(db, principal, label_id)

    return db.query(EntryDB).join(EntryLabelDB, EntryLabelDB.entry_id == EntryDB.id).filter(
        EntryLabelDB.label_id == label_id,
        EntryLabelDB.user_id == principal.user_id
    ).order_by(EntryDB.id).all()


def add_label_to_entry(db: Session, principal: UserPrincipal, entry_id: int, label_id: int) -> EntryLabelDB:
    """
    Link a label to an entry.

    Both rows must belong to the principal. A second link for the same
    pair is refused by the unique index, not by a lookup beforehand.
    """
    require_valid_credentials(db, principal)
    _verify_entry(db, principal, entry_id)
    _verify_label(db, principal, label_id)

    db_entry_label = EntryLabelDB(
        entry_id=entry_id,
        label_id=label_id,
        user_id=principal.user_id
    )

    try:
        db.add(db_entry_label)
        db.commit()
        db.refresh(db_entry_label)
    except IntegrityError:
        db.rollback()
        raise ConflictError("Entry is already tagged with this label")

    logger.info("Linked label %s to entry %s", label_id, entry_id)
    return db_entry_label


def remove_label_from_entry(db: Session, principal: UserPrincipal, entry_id: int, label_id: int) -> int:
    """Remove a label from an entry"""

    require_valid_credentials(db, principal)

    deleted = db.query(EntryLabelDB).filter(
        EntryLabelDB.entry_id == entry_id,
        EntryLabelDB.label_id == label_id,
        EntryLabelDB.user_id == principal.user_id
    ).delete(synchronize_session=False)
    db.commit()

    if deleted == 0:
        raise NotFoundError("Entry label relationship not found")

    logger.info("Unlinked label %s from entry %s", label_id, entry_id)
    return deleted


# ===== BATCH OPERATIONS =====

def read_db_labels_for_entries(db: Session, principal: UserPrincipal, entry_ids: List[int]) -> List[List[LabelDB]]:
    """Labels of each given entry, one list per entry id in request order"""
    check_batch(entry_ids)
    return [read_db_labels_for_entry(db, principal, entry_id) for entry_id in entry_ids]


def add_labels_to_entries(db: Session, principal: UserPrincipal, entry_ids: List[int],
                          label_ids: List[int]) -> List[EntryLabelDB]:
    """
    Link the n-th label to the n-th entry for every position, in one
    transaction. A missing row or an existing link rolls back all links.
    """
    check_batch(entry_ids, label_ids)
    require_valid_credentials(db, principal)

    links = []
    try:
        for entry_id, label_id in zip(entry_ids, label_ids):
            _verify_entry(db, principal, entry_id)
            _verify_label(db, principal, label_id)
            db_entry_label = EntryLabelDB(entry_id=entry_id, label_id=label_id, user_id=principal.user_id)
            db.add(db_entry_label)
            db.flush()
            links.append(db_entry_label)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Entry is already tagged with this label")
    except Exception:
        db.rollback()
        raise

    for db_entry_label in links:
        db.refresh(db_entry_label)
    logger.info("Linked %d labels for user %s", len(links), principal.user_id)
    return links


def remove_labels_from_entries(db: Session, principal: UserPrincipal, entry_ids: List[int],
                               label_ids: List[int]) -> List[int]:
    """Remove the n-th label from the n-th entry; returns the row count of each removal"""
    check_batch(entry_ids, label_ids)
    require_valid_credentials(db, principal)

    removed = []
    try:
        for entry_id, label_id in zip(entry_ids, label_ids):
            deleted = db.query(EntryLabelDB).filter(
                EntryLabelDB.entry_id == entry_id,
                EntryLabelDB.label_id == label_id,
                EntryLabelDB.user_id == principal.user_id
            ).delete(synchronize_session=False)
            if deleted == 0:
                raise NotFoundError(f"Label {label_id} is not attached to entry {entry_id}")
            removed.append(deleted)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Unlinked %d labels for user %s", len(removed), principal.user_id)
    return removed
