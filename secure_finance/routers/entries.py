from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session
from typing import List

from secure_finance.auth import get_current_user
from secure_finance.crud import crud_entry
from secure_finance.models import entry as entry_models
from secure_finance.models.user import UserPrincipal
from secure_finance.db.core import get_db, NotFoundError, CredentialsError

router = APIRouter(
    prefix="/categories/subcategories",
    tags=["entries"],
)

@router.post("/{subcategory_id}/entries", response_model=entry_models.EntryResponse,
             status_code=status.HTTP_201_CREATED)
def create_entry(
    entry: entry_models.EntryCreate,
    subcategory_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Create a new entry in the given subcategory. The creation time is set by the server.
    """
    try:
        return crud_entry.create_db_entry(db=db, principal=principal, subcategory_id=subcategory_id, entry_data=entry)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/{subcategory_id}/entries/bulk", response_model=List[entry_models.EntryBulkResponse],
             status_code=status.HTTP_201_CREATED)
def bulk_create_entries(
    entries: List[entry_models.EntryBulkItem],
    subcategory_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Create several entries in one subcategory, e.g. when a mobile client syncs offline entries.
    """
    try:
        created = crud_entry.bulk_create_db_entries(
            db=db, principal=principal, subcategory_id=subcategory_id, items=entries
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [
        entry_models.EntryBulkResponse(
            **entry_models.EntryResponse.model_validate(db_entry).model_dump(),
            mobile_id=mobile_id
        )
        for db_entry, mobile_id in created
    ]

@router.patch("/entries/batch", response_model=List[entry_models.EntryResponse])
def patch_entries(
    batch: entry_models.EntryBatchPatch,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Partially update several entries in one transaction.
    """
    try:
        return crud_entry.patch_db_entries(
            db=db, principal=principal, subcategory_ids=batch.subcategory_ids,
            entry_ids=batch.entry_ids, entry_updates=batch.updates
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/entries/batch", response_model=List[int])
def delete_entries(
    subcategory_ids: List[int] = Query(...),
    entry_ids: List[int] = Query(...),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Delete several entries, each addressed by its subcategory id and entry id.
    """
    try:
        return crud_entry.delete_db_entries(
            db=db, principal=principal, subcategory_ids=subcategory_ids, entry_ids=entry_ids
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/{subcategory_id}/entries", response_model=List[entry_models.EntryResponse])
def read_entries(
    subcategory_id: int = Path(..., gt=0),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Retrieve the entries of a subcategory.
    """
    try:
        return crud_entry.read_db_entries(
            db=db, principal=principal, subcategory_id=subcategory_id, skip=skip, limit=limit
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

@router.get("/{subcategory_id}/entries/{entry_id}", response_model=entry_models.EntryResponse)
def read_entry(
    subcategory_id: int = Path(..., gt=0),
    entry_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    try:
        db_entry = crud_entry.read_db_entry(db=db, principal=principal, subcategory_id=subcategory_id, entry_id=entry_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if db_entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return db_entry

@router.put("/{subcategory_id}/entries/{entry_id}", response_model=entry_models.EntryResponse)
def update_entry(
    entry: entry_models.EntryUpdate,
    subcategory_id: int = Path(..., gt=0),
    entry_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Replace every field of an entry except its creation time.
    """
    try:
        crud_entry.update_db_entry(
            db=db, principal=principal, subcategory_id=subcategory_id, entry_id=entry_id, entry=entry
        )
        return crud_entry.read_db_entry(
            db=db, principal=principal, subcategory_id=entry.subcategory_id, entry_id=entry_id
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.patch("/{subcategory_id}/entries/{entry_id}", response_model=entry_models.EntryResponse)
def patch_entry(
    entry: entry_models.EntryPatch,
    subcategory_id: int = Path(..., gt=0),
    entry_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Update only the fields present in the request body, so unrelated encrypted fields need not be resent.
    """
    try:
        crud_entry.patch_db_entry(
            db=db, principal=principal, subcategory_id=subcategory_id, entry_id=entry_id, entry_updates=entry
        )
        return crud_entry.read_db_entry(
            db=db, principal=principal,
            subcategory_id=entry.subcategory_id or subcategory_id, entry_id=entry_id
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{subcategory_id}/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    subcategory_id: int = Path(..., gt=0),
    entry_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    try:
        crud_entry.delete_db_entry(db=db, principal=principal, subcategory_id=subcategory_id, entry_id=entry_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
