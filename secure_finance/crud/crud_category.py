from sqlalchemy.orm import Session
from typing import List, Optional, Tuple

from secure_finance.db.core import CategoryDB
from secure_finance.crud.base import OwnedRepository, check_batch
from secure_finance.models.category import CategoryCreate, CategoryUpdate, CategoryPatch, CategoryBulkItem
from secure_finance.models.user import UserPrincipal

categories = OwnedRepository(
    CategoryDB,
    label="Category",
    opaque_fields=("name", "description"),
    mutable_fields=("name", "description", "colour_id"),
    required_fields=("name", "colour_id"),
)


def create_db_category(db: Session, principal: UserPrincipal, category_data: CategoryCreate) -> CategoryDB:
    """Create a new category for the principal"""
    return categories.create(db, principal, category_data.model_dump())

def bulk_create_db_categories(db: Session, principal: UserPrincipal,
                              items: List[CategoryBulkItem]) -> List[Tuple[CategoryDB, Optional[int]]]:
    return categories.create_many(db, principal, [(item.model_dump(exclude={"mobile_id"}), item.mobile_id) for item in items])

def read_db_categories(db: Session, principal: UserPrincipal, skip: int = 0, limit: int = 100) -> List[CategoryDB]:
    """Read all categories of the principal"""
    return categories.read_all(db, principal, skip=skip, limit=limit)

def read_db_category(db: Session, principal: UserPrincipal, category_id: int) -> Optional[CategoryDB]:
    """Read a single category by its ID"""
    return categories.read(db, principal, category_id)

def update_db_category(db: Session, principal: UserPrincipal, category_id: int, category: CategoryUpdate) -> int:
    return categories.update(db, principal, category_id, category.model_dump())

def patch_db_category(db: Session, principal: UserPrincipal, category_id: int, category_updates: CategoryPatch) -> int:
    return categories.update_fields(db, principal, category_id, category_updates.model_dump(exclude_unset=True))

def update_db_category_name(db: Session, principal: UserPrincipal, category_id: int, name: str) -> int:
    return categories.update_field(db, principal, category_id, "name", name)

def update_db_category_description(db: Session, principal: UserPrincipal, category_id: int, description: Optional[str]) -> int:
    return categories.update_field(db, principal, category_id, "description", description)

def update_db_category_colour(db: Session, principal: UserPrincipal, category_id: int, colour_id: int) -> int:
    return categories.update_field(db, principal, category_id, "colour_id", colour_id)

def delete_db_category(db: Session, principal: UserPrincipal, category_id: int) -> int:
    """Delete a category; its subcategories and their entries cascade"""
    return categories.delete(db, principal, category_id)


# ===== BATCH OPERATIONS =====

def patch_db_categories(db: Session, principal: UserPrincipal, category_ids: List[int],
                        category_updates: List[CategoryPatch]) -> List[CategoryDB]:
    """Partially update several categories; updates are matched to ids by position"""
    check_batch(category_ids, items=category_updates)
    return categories.update_many(db, principal, [
        (category_id, None, updates.model_dump(exclude_unset=True))
        for category_id, updates in zip(category_ids, category_updates)
    ])

def delete_db_categories(db: Session, principal: UserPrincipal, category_ids: List[int]) -> List[int]:
    check_batch(category_ids)
    return categories.delete_many(db, principal, [(category_id, None) for category_id in category_ids])
