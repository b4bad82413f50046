from sqlalchemy.orm import Session
from typing import List, Optional

from secure_finance.db.core import ColourDB


def read_db_colours(db: Session, skip: int = 0, limit: int = 100) -> List[ColourDB]:
    """Read the shared colour palette"""
    return db.query(ColourDB).order_by(ColourDB.id).offset(skip).limit(limit).all()

def read_db_colour(db: Session, colour_id: int) -> Optional[ColourDB]:
    return db.query(ColourDB).filter(ColourDB.id == colour_id).first()
