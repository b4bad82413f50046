from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List, Dict, Any, Tuple
import secrets

from secure_finance.db.core import UserDB, NotFoundError, CredentialsError, ConflictError
from secure_finance.db.opaque import decode_opaque
from secure_finance.models.user import UserCreate, UserReplace, UserUpdate, UserBulkItem, UserPrincipal
from secure_finance.services.user_cache import UserIdCache
from secure_finance.logging_config import get_logger, get_auth_logger

logger = get_logger(__name__)
auth_logger = get_auth_logger()


# ===== CREDENTIAL VALIDATION =====

def principal_from_user(db_user: UserDB) -> UserPrincipal:
    """Build the credential claim carried through a request"""
    return UserPrincipal(
        user_id=db_user.id,
        username=db_user.username,
        password=db_user.password,
        email=db_user.email,
        first_name=db_user.first_name,
        last_name=db_user.last_name,
    )


def validate_user_credentials(db: Session, principal: UserPrincipal) -> bool:
    """
    Re-fetch the principal's stored record and compare every field.

    Returns False on any mismatch or when the user no longer exists.
    Database errors propagate.
    """
    db_user = db.query(UserDB).filter(UserDB.id == principal.user_id).first()
    if db_user is None:
        return False

    return (
        db_user.id == principal.user_id
        and db_user.username == principal.username
        and secrets.compare_digest(bytes(db_user.password), principal.password)
        and db_user.email == principal.email
        and db_user.first_name == principal.first_name
        and db_user.last_name == principal.last_name
    )


def require_valid_credentials(db: Session, principal: UserPrincipal) -> None:
    if not validate_user_credentials(db, principal):
        auth_logger.warning("Credential validation failed for user id %s", principal.user_id)
        raise CredentialsError("Stored credentials do not match the authenticated user")


# ===== LOOKUPS =====

def read_db_user(db: Session, user_id: int = None, username: str = None,
                 email: str = None) -> Optional[UserDB]:
    """Read a user from the database by one of its identifiers"""

    query = db.query(UserDB)

    if user_id:
        return query.filter(UserDB.id == user_id).first()
    elif username:
        return query.filter(UserDB.username == username).first()
    elif email:
        return query.filter(UserDB.email == email).first()
    else:
        raise ValueError("Must provide at least one identifier (user_id, username, or email)")


def get_user_id(db: Session, username: str, cache: Optional[UserIdCache] = None) -> int:
    """Resolve a username to its id, consulting the cache first"""
    if cache is not None:
        cached_id = cache.get(username)
        if cached_id is not None:
            return cached_id

    db_user = read_db_user(db, username=username)
    if db_user is None:
        raise NotFoundError("User not found")

    if cache is not None:
        cache.put(username, db_user.id)
    return db_user.id


def authenticate_user(db: Session, username: str, password: str,
                      cache: Optional[UserIdCache] = None) -> Optional[UserDB]:
    """
    Authenticate by exact match of username and opaque password bytes.

    The password arrives Base64-encoded exactly like every other opaque
    field. No hashing happens here; whatever the client stored is what
    has to be presented.
    """
    password_bytes = decode_opaque(password, "password")

    db_user = None
    cached_id = cache.get(username) if cache is not None else None
    if cached_id is not None:
        db_user = db.query(UserDB).filter(UserDB.id == cached_id).first()
        if db_user is None or db_user.username != username:
            # stale: account deleted or renamed behind our back
            cache.invalidate(username)
            db_user = None

    if db_user is None:
        db_user = read_db_user(db, username=username)
    if db_user is None:
        auth_logger.info("Rejected login for unknown user '%s'", username)
        return None

    if cache is not None:
        cache.put(username, db_user.id)

    if not secrets.compare_digest(bytes(db_user.password), password_bytes):
        auth_logger.info("Rejected login for user '%s'", username)
        return None

    return db_user


# ===== DATABASE OPERATIONS =====

def check_user_conflicts(db: Session, username: Optional[str], email: Optional[str],
                         exclude_user_id: Optional[int] = None) -> None:
    """Raise ConflictError if the username or email is taken by another account"""

    def taken(column, value) -> bool:
        if value is None:
            return False
        query = db.query(UserDB).filter(column == value)
        if exclude_user_id is not None:
            query = query.filter(UserDB.id != exclude_user_id)
        return query.first() is not None

    username_taken = taken(UserDB.username, username)
    email_taken = taken(UserDB.email, email)

    if username_taken and email_taken:
        raise ConflictError("Both username and email address already exist.")
    if username_taken:
        raise ConflictError("Username already exists.")
    if email_taken:
        raise ConflictError("Email address already exists.")


def _insert_user(db: Session, user_data: UserCreate) -> UserDB:
    check_user_conflicts(db, user_data.username, user_data.email)

    db_user = UserDB(
        username=user_data.username,
        password=decode_opaque(user_data.password, "password"),
        email=user_data.email,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
    )
    db.add(db_user)
    db.flush()
    return db_user


def create_db_user(db: Session, user_data: UserCreate) -> UserDB:
    """Create a new user in the database"""
    return bulk_create_db_users(db, [UserBulkItem(**user_data.model_dump())])[0][0]


def bulk_create_db_users(db: Session, users: List[UserBulkItem]) -> List[Tuple[UserDB, Optional[int]]]:
    """
    Register several users in order, pairing each with its client-side id.
    All of them are committed together; one conflict writes none.
    """
    try:
        created = [
            (_insert_user(db, UserCreate(**user_data.model_dump(exclude={"mobile_id"}))), user_data.mobile_id)
            for user_data in users
        ]
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User creation failed due to a uniqueness constraint")
    except Exception:
        db.rollback()
        raise

    for db_user, _ in created:
        db.refresh(db_user)
        logger.info("Created user %s", db_user.id)
    return created


def _write_user_columns(db: Session, principal: UserPrincipal, values: Dict[str, Any],
                        cache: Optional[UserIdCache] = None) -> UserDB:
    """Single UPDATE over the given columns of the principal's own row"""

    require_valid_credentials(db, principal)

    if not values:
        raise ValueError("No fields to update")
    if 'username' in values and not values['username']:
        raise ValueError("username cannot be empty")

    if 'password' in values:
        if values['password'] is None:
            raise ValueError("password cannot be empty")
        values['password'] = decode_opaque(values['password'], "password")

    check_user_conflicts(db, values.get('username'), values.get('email'), exclude_user_id=principal.user_id)

    try:
        updated = db.query(UserDB).filter(UserDB.id == principal.user_id).update(values, synchronize_session=False)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User update failed due to a uniqueness constraint")

    if updated == 0:
        raise NotFoundError(f"User with id {principal.user_id} not found")

    if cache is not None and values.get('username', principal.username) != principal.username:
        cache.invalidate(principal.username)

    logger.info("Updated %s of user %s", ", ".join(sorted(values)), principal.user_id)
    return read_db_user(db, user_id=principal.user_id)


def _own_account(principal: UserPrincipal, user_id: int) -> None:
    if principal.user_id != user_id:
        auth_logger.warning("User %s attempted to modify account %s", principal.user_id, user_id)
        raise CredentialsError("Cannot modify another user's account")


def update_db_user(db: Session, principal: UserPrincipal, user_id: int, user: UserReplace,
                   cache: Optional[UserIdCache] = None) -> UserDB:
    """Replace every field of the principal's account"""
    _own_account(principal, user_id)
    return _write_user_columns(db, principal, user.model_dump(), cache)


def patch_db_user(db: Session, principal: UserPrincipal, user_id: int, user_updates: UserUpdate,
                  cache: Optional[UserIdCache] = None) -> UserDB:
    """Update only the provided fields; null or omitted fields keep their stored value"""
    _own_account(principal, user_id)
    values = {field: value for field, value in user_updates.model_dump().items() if value is not None}
    return _write_user_columns(db, principal, values, cache)


def update_db_user_username(db: Session, principal: UserPrincipal, username: str,
                            cache: Optional[UserIdCache] = None) -> UserDB:
    return _write_user_columns(db, principal, {'username': username.strip() if username else username}, cache)


def update_db_user_password(db: Session, principal: UserPrincipal, password: str) -> UserDB:
    return _write_user_columns(db, principal, {'password': password})


def update_db_user_email(db: Session, principal: UserPrincipal, email: Optional[str]) -> UserDB:
    return _write_user_columns(db, principal, {'email': email})


def update_db_user_first_name(db: Session, principal: UserPrincipal, first_name: Optional[str]) -> UserDB:
    return _write_user_columns(db, principal, {'first_name': first_name})


def update_db_user_last_name(db: Session, principal: UserPrincipal, last_name: Optional[str]) -> UserDB:
    return _write_user_columns(db, principal, {'last_name': last_name})


def delete_db_user(db: Session, principal: UserPrincipal, cache: Optional[UserIdCache] = None) -> int:
    """Delete the principal's account; owned rows go with it via ON DELETE CASCADE"""

    require_valid_credentials(db, principal)

    deleted = db.query(UserDB).filter(UserDB.id == principal.user_id).delete(synchronize_session=False)
    db.commit()

    if deleted == 0:
        raise NotFoundError(f"User with id {principal.user_id} not found")

    if cache is not None:
        cache.invalidate(principal.username)

    logger.info("Deleted user %s", principal.user_id)
    return deleted
