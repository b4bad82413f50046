from sqlalchemy.orm import Session
from typing import List, Optional

from secure_finance.db.core import CategoryDB, SubcategoryDB
from secure_finance.crud.base import OwnedRepository, check_batch
from secure_finance.models.subcategory import SubcategoryCreate, SubcategoryUpdate, SubcategoryPatch
from secure_finance.models.user import UserPrincipal

subcategories = OwnedRepository(
    SubcategoryDB,
    label="Subcategory",
    opaque_fields=("name", "description"),
    mutable_fields=("category_id", "name", "description", "colour_id"),
    required_fields=("category_id", "name", "colour_id"),
    parent_field="category_id",
    parent_model=CategoryDB,
    parent_label="Category",
)


def create_db_subcategory(db: Session, principal: UserPrincipal, category_id: int,
                          subcategory_data: SubcategoryCreate) -> SubcategoryDB:
    """Create a subcategory inside one of the principal's categories"""
    return subcategories.create(db, principal, subcategory_data.model_dump(), parent_id=category_id)


def read_db_subcategories(db: Session, principal: UserPrincipal, category_id: int,
                          skip: int = 0, limit: int = 100) -> List[SubcategoryDB]:
    return subcategories.read_all(db, principal, parent_id=category_id, skip=skip, limit=limit)


def read_db_subcategory(db: Session, principal: UserPrincipal, category_id: int,
                        subcategory_id: int) -> Optional[SubcategoryDB]:
    return subcategories.read(db, principal, subcategory_id, parent_id=category_id)


def update_db_subcategory(db: Session, principal: UserPrincipal, category_id: int, subcategory_id: int,
                          subcategory: SubcategoryUpdate) -> int:
    """Replace the subcategory; category_id in the body may move it to another category"""
    return subcategories.update(db, principal, subcategory_id, subcategory.model_dump(), parent_id=category_id)


def patch_db_subcategory(db: Session, principal: UserPrincipal, category_id: int, subcategory_id: int,
                         subcategory_updates: SubcategoryPatch) -> int:
    return subcategories.update_fields(db, principal, subcategory_id,
                                       subcategory_updates.model_dump(exclude_unset=True), parent_id=category_id)


def update_db_subcategory_name(db: Session, principal: UserPrincipal, category_id: int, subcategory_id: int,
                               name: str) -> int:
    return subcategories.update_field(db, principal, subcategory_id, "name", name, parent_id=category_id)


def update_db_subcategory_description(db: Session, principal: UserPrincipal, category_id: int, subcategory_id: int,
                                      description: Optional[str]) -> int:
    return subcategories.update_field(db, principal, subcategory_id, "description", description, parent_id=category_id)


def update_db_subcategory_colour(db: Session, principal: UserPrincipal, category_id: int, subcategory_id: int,
                                 colour_id: int) -> int:
    return subcategories.update_field(db, principal, subcategory_id, "colour_id", colour_id, parent_id=category_id)


def update_db_subcategory_category(db: Session, principal: UserPrincipal, category_id: int, subcategory_id: int,
                                   new_category_id: int) -> int:
    """Move a subcategory to another of the principal's categories"""
    return subcategories.update_field(db, principal, subcategory_id, "category_id", new_category_id, parent_id=category_id)


def delete_db_subcategory(db: Session, principal: UserPrincipal, category_id: int, subcategory_id: int) -> int:
    return subcategories.delete(db, principal, subcategory_id, parent_id=category_id)


# ===== BATCH OPERATIONS =====

def patch_db_subcategories(db: Session, principal: UserPrincipal, category_ids: List[int],
                           subcategory_ids: List[int],
                           subcategory_updates: List[SubcategoryPatch]) -> List[SubcategoryDB]:
    """
    Partially update several subcategories. The n-th update applies to the
    n-th subcategory id inside the n-th category id.
    """
    check_batch(category_ids, subcategory_ids, items=subcategory_updates)
    return subcategories.update_many(db, principal, [
        (subcategory_id, category_id, updates.model_dump(exclude_unset=True))
        for category_id, subcategory_id, updates in zip(category_ids, subcategory_ids, subcategory_updates)
    ])


def delete_db_subcategories(db: Session, principal: UserPrincipal, category_ids: List[int],
                            subcategory_ids: List[int]) -> List[int]:
    check_batch(category_ids, subcategory_ids)
    return subcategories.delete_many(db, principal, [
        (subcategory_id, category_id) for category_id, subcategory_id in zip(category_ids, subcategory_ids)
    ])
