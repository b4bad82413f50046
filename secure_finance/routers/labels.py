from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session
from typing import List

from secure_finance.auth import get_current_user
from secure_finance.crud import crud_label
from secure_finance.models import label as label_models
from secure_finance.models.user import UserPrincipal
from secure_finance.db.core import get_db, NotFoundError, CredentialsError

router = APIRouter(
    prefix="/labels",
    tags=["labels"],
)

@router.post("/", response_model=label_models.LabelResponse, status_code=status.HTTP_201_CREATED)
def create_label(
    label: label_models.LabelCreate,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Create a new label.
    """
    try:
        return crud_label.create_db_label(db=db, principal=principal, label_data=label)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/bulk", response_model=List[label_models.LabelBulkResponse], status_code=status.HTTP_201_CREATED)
def bulk_create_labels(
    labels: List[label_models.LabelBulkItem],
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Create several labels at once.
    """
    try:
        created = crud_label.bulk_create_db_labels(db=db, principal=principal, items=labels)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [
        label_models.LabelBulkResponse(
            **label_models.LabelResponse.model_validate(db_label).model_dump(),
            mobile_id=mobile_id
        )
        for db_label, mobile_id in created
    ]

@router.patch("/batch", response_model=List[label_models.LabelResponse])
def patch_labels(
    batch: label_models.LabelBatchPatch,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Partially update several labels in one transaction.
    """
    try:
        return crud_label.patch_db_labels(db=db, principal=principal, label_ids=batch.label_ids,
                                          label_updates=batch.updates)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/batch", response_model=List[int])
def delete_labels(
    label_ids: List[int] = Query(...),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Delete several labels and their entry links.
    """
    try:
        return crud_label.delete_db_labels(db=db, principal=principal, label_ids=label_ids)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[label_models.LabelResponse])
def read_labels(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Retrieve all labels for the current user.
    """
    try:
        return crud_label.read_db_labels(db=db, principal=principal, skip=skip, limit=limit)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

@router.get("/{label_id}", response_model=label_models.LabelResponse)
def read_label(
    label_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Retrieve a specific label by its ID.
    """
    try:
        db_label = crud_label.read_db_label(db=db, principal=principal, label_id=label_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if db_label is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Label not found")
    return db_label

@router.put("/{label_id}", response_model=label_models.LabelResponse)
def update_label(
    label: label_models.LabelUpdate,
    label_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    try:
        crud_label.update_db_label(db=db, principal=principal, label_id=label_id, label=label)
        return crud_label.read_db_label(db=db, principal=principal, label_id=label_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.patch("/{label_id}", response_model=label_models.LabelResponse)
def patch_label(
    label: label_models.LabelPatch,
    label_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Update a label's name, description or colour.
    """
    try:
        crud_label.patch_db_label(db=db, principal=principal, label_id=label_id, label_updates=label)
        return crud_label.read_db_label(db=db, principal=principal, label_id=label_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{label_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_label(
    label_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    principal: UserPrincipal = Depends(get_current_user)
):
    """
    Delete a label. This also removes its links to any entries.
    """
    try:
        crud_label.delete_db_label(db=db, principal=principal, label_id=label_id)
    except CredentialsError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
