from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List
from barberbook.services.review_crud import review_crud
from barberbook.schemas.review_schema import ReviewCreate, ReviewResponse, ReviewWithDetails
from barberbook.database import get_db
from barberbook.security.auth import get_current_customer
from barberbook.models.user_model import User
from barberbook.logger import get_logger

review_router = APIRouter()
logger = get_logger(__name__)


@review_router.post(
    "/bookings/{booking_id}/review", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED
)
def create_review(
    booking_id: str,
    review: ReviewCreate,
    current_user: User = Depends(get_current_customer),
    db: Session = Depends(get_db),
):
    """Rate a completed booking (once per booking)"""
    try:
        logger.info(f"Customer {current_user.email} reviewing booking {booking_id}")
        db_review = review_crud.create_review(db, booking_id, review, current_user)
        return ReviewResponse.model_validate(db_review)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating review: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error occurred while creating review",
        )


@review_router.get(
    "/barbers/{barber_id}/reviews",
    response_model=List[ReviewWithDetails],
    status_code=status.HTTP_200_OK,
)
def get_barber_reviews(
    barber_id: str,
    skip: int = Query(0, ge=0, description="Number of reviews to skip"),
    limit: int = Query(100, ge=1, le=100, description="Number of reviews to retrieve"),
    db: Session = Depends(get_db),
):
    """Public reviews of a barber, newest first"""
    try:
        logger.info(f"Fetching reviews for barber: {barber_id}")
        return review_crud.get_barber_reviews(db, barber_id, skip=skip, limit=limit)

    except Exception as e:
        logger.error(f"Error fetching reviews for barber {barber_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error occurred while fetching reviews",
        )
