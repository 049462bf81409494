"""
Known scammer number endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from mindshield.core.auth import verify_api_key
from mindshield.database.connection import get_db
from mindshield.database.utils import CallRecordRepository
from mindshield.schemas import FlaggedNumberResponse

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/flagged-numbers", response_model=List[FlaggedNumberResponse])
async def list_flagged_numbers(db: Session = Depends(get_db)):
    numbers = CallRecordRepository(db).get_all_flagged_numbers()
    return [FlaggedNumberResponse(**number.to_dict()) for number in numbers]


@router.get("/flagged-numbers/{phone_number}", response_model=FlaggedNumberResponse)
async def get_flagged_number(phone_number: str, db: Session = Depends(get_db)):
    number = CallRecordRepository(db).get_flagged_number(phone_number)
    if number is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Number {phone_number} is not flagged"
        )
    return FlaggedNumberResponse(**number.to_dict())
