from sqlalchemy.orm import Session
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from secure_finance.db.core import Base, ColourDB, NotFoundError
from secure_finance.db.opaque import decode_opaque
from secure_finance.models.user import UserPrincipal
from secure_finance.crud.crud_user import require_valid_credentials
from secure_finance.logging_config import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class OwnedRepository(Generic[ModelT]):
    """
    CRUD over a table whose rows belong to one user and, optionally, to a
    parent row (a category for subcategories, a subcategory for entries).

    Every operation first re-validates the principal, then runs a single
    statement whose predicate carries the owner id and, when given, the
    parent id. Opaque columns are Base64-decoded on the way in.
    """

    def __init__(
        self,
        model: Type[ModelT],
        label: str,
        opaque_fields: Sequence[str],
        mutable_fields: Sequence[str],
        required_fields: Sequence[str] = (),
        parent_field: Optional[str] = None,
        parent_model: Optional[Type[Base]] = None,
        parent_label: Optional[str] = None,
    ):
        self.model = model
        self.label = label
        self.opaque_fields = tuple(opaque_fields)
        self.mutable_fields = tuple(mutable_fields)
        self.required_fields = tuple(required_fields)
        self.parent_field = parent_field
        self.parent_model = parent_model
        self.parent_label = parent_label or "Parent"

    # ===== PREDICATES AND CHECKS =====

    def _scope(self, principal: UserPrincipal, parent_id: Optional[int] = None) -> List[Any]:
        criteria = [self.model.user_id == principal.user_id]
        if self.parent_field is not None and parent_id is not None:
            criteria.append(getattr(self.model, self.parent_field) == parent_id)
        return criteria

    def _scoped_row(self, principal: UserPrincipal, record_id: int, parent_id: Optional[int] = None) -> List[Any]:
        return [self.model.id == record_id] + self._scope(principal, parent_id)

    def _check_parent(self, db: Session, principal: UserPrincipal, parent_id: int) -> None:
        owned = db.query(self.parent_model.id).filter(
            self.parent_model.id == parent_id,
            self.parent_model.user_id == principal.user_id
        ).first()
        if owned is None:
            raise NotFoundError(f"{self.parent_label} with id {parent_id} not found")

    def _check_colour(self, db: Session, colour_id: int) -> None:
        if db.query(ColourDB.id).filter(ColourDB.id == colour_id).first() is None:
            raise NotFoundError(f"Colour with id {colour_id} not found")

    def _prepare(self, db: Session, principal: UserPrincipal, values: Dict[str, Any]) -> Dict[str, Any]:
        """Decode opaque fields and verify the references a write would store"""
        prepared = {}
        for field, value in values.items():
            if field in self.required_fields and value is None:
                raise ValueError(f"{field} is required")
            if field in self.opaque_fields:
                value = decode_opaque(value, field)
            prepared[field] = value

        if prepared.get('colour_id') is not None:
            self._check_colour(db, prepared['colour_id'])
        if self.parent_field is not None and prepared.get(self.parent_field) is not None:
            self._check_parent(db, principal, prepared[self.parent_field])
        return prepared

    def _before_insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    # ===== READS =====

    def read_all(self, db: Session, principal: UserPrincipal, parent_id: Optional[int] = None,
                 skip: int = 0, limit: int = 100) -> List[ModelT]:
        require_valid_credentials(db, principal)
        return db.query(self.model).filter(*self._scope(principal, parent_id)) \
            .order_by(self.model.id).offset(skip).limit(limit).all()

    def read(self, db: Session, principal: UserPrincipal, record_id: int,
             parent_id: Optional[int] = None) -> Optional[ModelT]:
        require_valid_credentials(db, principal)
        return db.query(self.model).filter(*self._scoped_row(principal, record_id, parent_id)).first()

    # ===== WRITES =====

    def _insert(self, db: Session, principal: UserPrincipal, values: Dict[str, Any],
                parent_id: Optional[int] = None) -> ModelT:
        values = dict(values)
        if self.parent_field is not None:
            values[self.parent_field] = parent_id
            if parent_id is None:
                raise ValueError(f"{self.parent_field} is required")

        prepared = self._before_insert(self._prepare(db, principal, values))
        db_row = self.model(user_id=principal.user_id, **prepared)

        db.add(db_row)
        db.flush()
        return db_row

    def _apply_update(self, db: Session, principal: UserPrincipal, record_id: int, values: Dict[str, Any],
                      parent_id: Optional[int] = None) -> int:
        if not values:
            raise ValueError("No fields to update")
        unknown = set(values) - set(self.mutable_fields)
        if unknown:
            raise ValueError(f"Cannot update {', '.join(sorted(unknown))} of a {self.label.lower()}")

        prepared = self._prepare(db, principal, values)
        updated = db.query(self.model).filter(*self._scoped_row(principal, record_id, parent_id)) \
            .update(prepared, synchronize_session=False)

        if updated == 0:
            raise NotFoundError(f"{self.label} with id {record_id} not found")
        return updated

    def _apply_delete(self, db: Session, principal: UserPrincipal, record_id: int,
                      parent_id: Optional[int] = None) -> int:
        deleted = db.query(self.model).filter(*self._scoped_row(principal, record_id, parent_id)) \
            .delete(synchronize_session=False)

        if deleted == 0:
            raise NotFoundError(f"{self.label} with id {record_id} not found")
        return deleted

    def create(self, db: Session, principal: UserPrincipal, values: Dict[str, Any],
               parent_id: Optional[int] = None) -> ModelT:
        """Insert one row owned by the principal; the generated id is on the returned row"""
        require_valid_credentials(db, principal)

        try:
            db_row = self._insert(db, principal, values, parent_id)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(db_row)

        logger.info("Created %s %s for user %s", self.label.lower(), db_row.id, principal.user_id)
        return db_row

    def create_many(self, db: Session, principal: UserPrincipal, items: List[Tuple[Dict[str, Any], Optional[int]]],
                    parent_id: Optional[int] = None) -> List[Tuple[ModelT, Optional[int]]]:
        """
        Insert several rows in one transaction, keeping each paired with its
        client-side id. If any item fails, none of them is written.
        """
        require_valid_credentials(db, principal)

        try:
            created = [(self._insert(db, principal, values, parent_id), mobile_id) for values, mobile_id in items]
            db.commit()
        except Exception:
            db.rollback()
            raise

        for db_row, _ in created:
            db.refresh(db_row)
        logger.info("Created %d %s rows for user %s", len(created), self.label.lower(), principal.user_id)
        return created

    def update_fields(self, db: Session, principal: UserPrincipal, record_id: int, values: Dict[str, Any],
                      parent_id: Optional[int] = None) -> int:
        """One UPDATE over exactly the given columns; other columns are untouched"""
        require_valid_credentials(db, principal)

        try:
            updated = self._apply_update(db, principal, record_id, values, parent_id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.debug("Updated %s of %s %s", ", ".join(sorted(values)), self.label.lower(), record_id)
        return updated

    def update_many(self, db: Session, principal: UserPrincipal,
                    changes: List[Tuple[int, Optional[int], Dict[str, Any]]]) -> List[ModelT]:
        """
        Apply (record_id, parent_id, values) updates in one transaction and
        return the updated rows in the same order. One miss rolls back all.
        """
        require_valid_credentials(db, principal)

        try:
            for record_id, parent_id, values in changes:
                self._apply_update(db, principal, record_id, values, parent_id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Updated %d %s rows of user %s", len(changes), self.label.lower(), principal.user_id)
        return [
            db.query(self.model).filter(*self._scoped_row(principal, record_id)).first()
            for record_id, _, _ in changes
        ]

    def update(self, db: Session, principal: UserPrincipal, record_id: int, values: Dict[str, Any],
               parent_id: Optional[int] = None) -> int:
        """Whole-record replacement: every mutable field is written, missing ones as null"""
        return self.update_fields(
            db, principal, record_id,
            {field: values.get(field) for field in self.mutable_fields},
            parent_id
        )

    def update_field(self, db: Session, principal: UserPrincipal, record_id: int, field: str, value: Any,
                     parent_id: Optional[int] = None) -> int:
        return self.update_fields(db, principal, record_id, {field: value}, parent_id)

    def delete(self, db: Session, principal: UserPrincipal, record_id: int,
               parent_id: Optional[int] = None) -> int:
        """Hard delete; the id is never handed out again"""
        require_valid_credentials(db, principal)

        try:
            deleted = self._apply_delete(db, principal, record_id, parent_id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Deleted %s %s of user %s", self.label.lower(), record_id, principal.user_id)
        return deleted

    def delete_many(self, db: Session, principal: UserPrincipal,
                    targets: List[Tuple[int, Optional[int]]]) -> List[int]:
        """Delete (record_id, parent_id) targets together; returns the row count of each"""
        require_valid_credentials(db, principal)

        try:
            deleted = [self._apply_delete(db, principal, record_id, parent_id) for record_id, parent_id in targets]
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Deleted %d %s rows of user %s", len(targets), self.label.lower(), principal.user_id)
        return deleted


def check_batch(*id_lists: List[int], items: Optional[List[Any]] = None) -> None:
    """
    Validate the id lists of a batch request: non-empty, positive ids, and
    every list (plus the item bodies, when given) of the same length.
    """
    lists = list(id_lists) + ([items] if items is not None else [])
    if not lists or not lists[0]:
        raise ValueError("At least one id is required")
    if len({len(values) for values in lists}) != 1:
        raise ValueError("The number of ids and items must be equal")
    for ids in id_lists:
        if any(record_id <= 0 for record_id in ids):
            raise ValueError("Ids must be greater than 0")
