from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session
from typing import List

from secure_finance.auth import get_current_user, get_user_cache
from secure_finance.crud import crud_user
from secure_finance.models import user as user_models
from secure_finance.services.user_cache import UserIdCache
from secure_finance.db.core import get_db, NotFoundError, CredentialsError, ConflictError

router = APIRouter(
    tags=["users"],
)

@router.post("/users", response_model=user_models.UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: user_models.UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user. The password is stored exactly as sent.
    """
    try:
        db_user = crud_user.create_db_user(db=db, user_data=user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return db_user

@router.post("/users/bulk", response_model=List[user_models.UserBulkResponse], status_code=status.HTTP_201_CREATED)
def bulk_create_users(users: List[user_models.UserBulkItem], db: Session = Depends(get_db)):
    try:
        created = crud_user.bulk_create_db_users(db=db, users=users)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [
        user_models.UserBulkResponse(
            **user_models.UserResponse.model_validate(db_user).model_dump(),
            mobile_id=mobile_id
        )
        for db_user, mobile_id in created
    ]

@router.get("/user", response_model=user_models.UserResponse)
def read_current_user(
    db: Session = Depends(get_db),
    principal: user_models.UserPrincipal = Depends(get_current_user)
):
    """
    Retrieve the authenticated user.
    """
    db_user = crud_user.read_db_user(db, user_id=principal.user_id)
    if db_user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return db_user

@router.put("/users/{user_id}", response_model=user_models.UserResponse)
def update_user(
    user: user_models.UserReplace,
    user_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: user_models.UserPrincipal = Depends(get_current_user),
    cache: UserIdCache = Depends(get_user_cache)
):
    """
    Replace every field of the authenticated user's account.
    """
    try:
        return crud_user.update_db_user(db=db, principal=principal, user_id=user_id, user=user, cache=cache)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.patch("/users/{user_id}", response_model=user_models.UserResponse)
def patch_user(
    user: user_models.UserUpdate,
    user_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: user_models.UserPrincipal = Depends(get_current_user),
    cache: UserIdCache = Depends(get_user_cache)
):
    """
    Update a user's profile.
    """
    try:
        return crud_user.patch_db_user(db=db, principal=principal, user_id=user_id, user_updates=user, cache=cache)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/users", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    db: Session = Depends(get_db),
    principal: user_models.UserPrincipal = Depends(get_current_user),
    cache: UserIdCache = Depends(get_user_cache)
):
    """
    Delete the authenticated user's account and everything it owns.
    """
    try:
        crud_user.delete_db_user(db=db, principal=principal, cache=cache)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
