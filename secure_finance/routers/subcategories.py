from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session
from typing import List

from secure_finance.auth import get_current_user
from secure_finance.crud import crud_subcategory
from secure_finance.models import subcategory as subcategory_models
from secure_finance.models.user import UserPrincipal
from secure_finance.db.core import get_db, NotFoundError, CredentialsError

router = APIRouter(
    prefix="/categories",
    tags=["subcategories"],
)

@router.patch("/subcategories/batch", response_model=List[subcategory_models.SubcategoryResponse])
def patch_subcategories(
    batch: subcategory_models.SubcategoryBatchPatch,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Partially update several subcategories in one transaction.
    """
    try:
        return crud_subcategory.patch_db_subcategories(
            db=db, principal=principal, category_ids=batch.category_ids,
            subcategory_ids=batch.subcategory_ids, subcategory_updates=batch.updates
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/subcategories/batch", response_model=List[int])
def delete_subcategories(
    category_ids: List[int] = Query(...),
    subcategory_ids: List[int] = Query(...),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Delete several subcategories, each addressed by its category id and subcategory id.
    """
    try:
        return crud_subcategory.delete_db_subcategories(
            db=db, principal=principal, category_ids=category_ids, subcategory_ids=subcategory_ids
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/{category_id}/subcategories", response_model=subcategory_models.SubcategoryResponse,
             status_code=status.HTTP_201_CREATED)
def create_subcategory(
    subcategory: subcategory_models.SubcategoryCreate,
    category_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Create a subcategory inside the given category.
    """
    try:
        return crud_subcategory.create_db_subcategory(
            db=db, principal=principal, category_id=category_id, subcategory_data=subcategory
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/{category_id}/subcategories", response_model=List[subcategory_models.SubcategoryResponse])
def read_subcategories(
    category_id: int = Path(..., gt=0),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Retrieve the subcategories of a category.
    """
    try:
        return crud_subcategory.read_db_subcategories(
            db=db, principal=principal, category_id=category_id, skip=skip, limit=limit
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

@router.get("/{category_id}/subcategories/{subcategory_id}", response_model=subcategory_models.SubcategoryResponse)
def read_subcategory(
    category_id: int = Path(..., gt=0),
    subcategory_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    try:
        db_subcategory = crud_subcategory.read_db_subcategory(
            db=db, principal=principal, category_id=category_id, subcategory_id=subcategory_id
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if db_subcategory is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subcategory not found")
    return db_subcategory

@router.put("/{category_id}/subcategories/{subcategory_id}", response_model=subcategory_models.SubcategoryResponse)
def update_subcategory(
    subcategory: subcategory_models.SubcategoryUpdate,
    category_id: int = Path(..., gt=0),
    subcategory_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Replace every field of a subcategory. A different category_id moves it.
    """
    try:
        crud_subcategory.update_db_subcategory(
            db=db, principal=principal, category_id=category_id,
            subcategory_id=subcategory_id, subcategory=subcategory
        )
        return crud_subcategory.read_db_subcategory(
            db=db, principal=principal, category_id=subcategory.category_id, subcategory_id=subcategory_id
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.patch("/{category_id}/subcategories/{subcategory_id}", response_model=subcategory_models.SubcategoryResponse)
def patch_subcategory(
    subcategory: subcategory_models.SubcategoryPatch,
    category_id: int = Path(..., gt=0),
    subcategory_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Update only the fields present in the request body.
    """
    try:
        crud_subcategory.patch_db_subcategory(
            db=db, principal=principal, category_id=category_id,
            subcategory_id=subcategory_id, subcategory_updates=subcategory
        )
        return crud_subcategory.read_db_subcategory(
            db=db, principal=principal,
            category_id=subcategory.category_id or category_id, subcategory_id=subcategory_id
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{category_id}/subcategories/{subcategory_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subcategory(
    category_id: int = Path(..., gt=0),
    subcategory_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Delete a subcategory together with its entries.
    """
    try:
        crud_subcategory.delete_db_subcategory(
            db=db, principal=principal, category_id=category_id, subcategory_id=subcategory_id
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
