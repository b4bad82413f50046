from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session
from typing import List

from secure_finance.auth import get_current_user
from secure_finance.crud import crud_colour
from secure_finance.models import colour as colour_models
from secure_finance.db.core import get_db

router = APIRouter(
    prefix="/colours",
    tags=["colours"],
    dependencies=[Depends(get_current_user)],
)

@router.get("/", response_model=List[colour_models.ColourResponse])
def read_colours(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """
    Retrieve the shared colour palette.
    """
    return crud_colour.read_db_colours(db, skip=skip, limit=limit)

@router.get("/{colour_id}", response_model=colour_models.ColourResponse)
def read_colour(colour_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    """
    Retrieve a single colour by its ID.
    """
    db_colour = crud_colour.read_db_colour(db, colour_id=colour_id)
    if db_colour is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Colour with ID {colour_id} does not exist")
    return db_colour
