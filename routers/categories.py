from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.response import success_response
from database.connection import get_db
from services.shop import list_categories

router = APIRouter()

@router.get("")
def get_categories(db: Session = Depends(get_db)):
    """Active categories in display order"""
    return success_response(categories=list_categories(db))
