from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session
from typing import List

from secure_finance.auth import get_current_user
from secure_finance.crud import crud_entry_label
from secure_finance.models import label as label_models
from secure_finance.models import entry as entry_models
from secure_finance.models.user import UserPrincipal
from secure_finance.db.core import get_db, NotFoundError, CredentialsError, ConflictError

router = APIRouter(
    prefix="/entry-labels",
    tags=["entry-labels"],
)

@router.get("/batch/labels", response_model=List[List[label_models.LabelResponse]])
def read_labels_for_entries(
    entry_ids: List[int] = Query(...),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Get the labels of several entries, one list per entry id.
    """
    try:
        return crud_entry_label.read_db_labels_for_entries(db=db, principal=principal, entry_ids=entry_ids)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/batch", response_model=List[label_models.EntryLabelResponse], status_code=status.HTTP_201_CREATED)
def add_labels_to_entries(
    batch: label_models.EntryLabelBatch,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Tag several entries at once. The n-th label goes on the n-th entry.
    """
    try:
        return crud_entry_label.add_labels_to_entries(
            db=db, principal=principal, entry_ids=batch.entry_ids, label_ids=batch.label_ids
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/batch", response_model=List[int])
def remove_labels_from_entries(
    entry_ids: List[int] = Query(...),
    label_ids: List[int] = Query(...),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Remove the n-th label from the n-th entry for every position.
    """
    try:
        return crud_entry_label.remove_labels_from_entries(
            db=db, principal=principal, entry_ids=entry_ids, label_ids=label_ids
        )
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/entries/{entry_id}/labels", response_model=List[label_models.LabelResponse])
def read_labels_for_entry(
    entry_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Get all labels attached to an entry.
    """
    try:
        return crud_entry_label.read_db_labels_for_entry(db=db, principal=principal, entry_id=entry_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.get("/labels/{label_id}/entries", response_model=List[entry_models.EntryResponse])
def read_entries_for_label(
    label_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Get all entries tagged with a label.
    """
    try:
        return crud_entry_label.read_db_entries_for_label(db=db, principal=principal, label_id=label_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.post("/entries/{entry_id}/labels/{label_id}", response_model=label_models.EntryLabelResponse,
             status_code=status.HTTP_201_CREATED)
def add_label_to_entry(
    entry_id: int = Path(..., gt=0),
    label_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Tag an entry with a label.
    """
    try:
        return crud_entry_label.add_label_to_entry(db=db, principal=principal, entry_id=entry_id, label_id=label_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.delete("/entries/{entry_id}/labels/{label_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_label_from_entry(
    entry_id: int = Path(..., gt=0),
    label_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Remove a label from an entry.
    """
    try:
        crud_entry_label.remove_label_from_entry(db=db, principal=principal, entry_id=entry_id, label_id=label_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
