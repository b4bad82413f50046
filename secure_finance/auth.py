from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from secure_finance.crud import crud_user
from secure_finance.db.core import get_db, EncodingError
from secure_finance.logging_config import get_auth_logger
from secure_finance.models.user import UserPrincipal
from secure_finance.services.user_cache import UserIdCache

security = HTTPBasic()
auth_logger = get_auth_logger()


def get_user_cache(request: Request) -> UserIdCache:
    return request.app.state.user_cache


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(security),
    db: Session = Depends(get_db),
    cache: UserIdCache = Depends(get_user_cache)
) -> UserPrincipal:
    """
    Resolve HTTP Basic credentials to the principal for this request.
    The password is the Base64 form of the stored opaque password.
    """
    try:
        db_user = crud_user.authenticate_user(db, credentials.username, credentials.password, cache)
    except EncodingError:
        auth_logger.info("Malformed Basic password for user '%s'", credentials.username)
        db_user = None

    if db_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Basic"},
        )
    return crud_user.principal_from_user(db_user)
