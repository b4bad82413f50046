from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session
from typing import List

from secure_finance.auth import get_current_user
from secure_finance.crud import crud_category
from secure_finance.models import category as category_models
from secure_finance.models.user import UserPrincipal
from secure_finance.db.core import get_db, NotFoundError, CredentialsError

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
)

@router.post("/", response_model=category_models.CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category: category_models.CategoryCreate,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Create a new category for the authenticated user.
    """
    try:
        return crud_category.create_db_category(db=db, principal=principal, category_data=category)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/bulk", response_model=List[category_models.CategoryBulkResponse], status_code=status.HTTP_201_CREATED)
def bulk_create_categories(
    categories: List[category_models.CategoryBulkItem],
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Create several categories at once. Each response item echoes the mobile_id it was sent with.
    """
    try:
        created = crud_category.bulk_create_db_categories(db=db, principal=principal, items=categories)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [
        category_models.CategoryBulkResponse(
            **category_models.CategoryResponse.model_validate(db_category).model_dump(),
            mobile_id=mobile_id
        )
        for db_category, mobile_id in created
    ]

@router.patch("/batch", response_model=List[category_models.CategoryResponse])
def patch_categories(
    batch: category_models.CategoryBatchPatch,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Partially update several categories in one transaction.
    """
    try:
        return crud_category.patch_db_categories(
            db=db, principal=principal, category_ids=batch.category_ids, category_updates=batch.updates
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/batch", response_model=List[int])
def delete_categories(
    category_ids: List[int] = Query(...),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Delete several categories. Nothing is deleted if any of them is missing.
    """
    try:
        return crud_category.delete_db_categories(db=db, principal=principal, category_ids=category_ids)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[category_models.CategoryResponse])
def read_categories(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Retrieve all categories of the authenticated user.
    """
    try:
        return crud_category.read_db_categories(db=db, principal=principal, skip=skip, limit=limit)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

@router.get("/{category_id}", response_model=category_models.CategoryResponse)
def read_category(
    category_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Retrieve a specific category by its ID.
    """
    try:
        db_category = crud_category.read_db_category(db=db, principal=principal, category_id=category_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if db_category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return db_category

@router.put("/{category_id}", response_model=category_models.CategoryResponse)
def update_category(
    category: category_models.CategoryUpdate,
    category_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Replace every field of a category.
    """
    try:
        crud_category.update_db_category(db=db, principal=principal, category_id=category_id, category=category)
        return crud_category.read_db_category(db=db, principal=principal, category_id=category_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.patch("/{category_id}", response_model=category_models.CategoryResponse)
def patch_category(
    category: category_models.CategoryPatch,
    category_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Update only the fields present in the request body.
    """
    try:
        crud_category.patch_db_category(db=db, principal=principal, category_id=category_id, category_updates=category)
        return crud_category.read_db_category(db=db, principal=principal, category_id=category_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Delete a category together with its subcategories and entries.
    """
    try:
        crud_category.delete_db_category(db=db, principal=principal, category_id=category_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
