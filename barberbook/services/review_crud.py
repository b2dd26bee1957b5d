from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from barberbook.models.review_model import Review
from barberbook.models.booking_model import Booking
from barberbook.models.barber_model import Barber
from barberbook.models.user_model import User
from barberbook.schemas.review_schema import ReviewCreate, ReviewWithDetails
from barberbook.logger import get_logger

logger = get_logger(__name__)


def updated_rating(current_mean: float, current_count: int, new_rating: int):
    """Fold one more rating into a running mean; returns (mean, count)"""
    count = (current_count or 0) + 1
    mean = ((current_mean or 0) * (count - 1) + new_rating) / count
    return round(mean, 2), count


def removed_rating(current_mean: float, current_count: int, old_rating: int):
    """Take one rating back out of a running mean; 0/0 once nothing is left"""
    count = (current_count or 0) - 1
    if count <= 0:
        return 0.0, 0
    mean = ((current_mean or 0) * (count + 1) - old_rating) / count
    return round(min(max(mean, 1.0), 5.0), 2), count


class ReviewCRUD:
    @staticmethod
    def create_review(db: Session, booking_id: str, review: ReviewCreate, customer: User) -> Review:
        """Review a completed booking once and update the barber's rating"""
        booking = db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.customer_id == str(customer.id)
        ).first()

        if not booking:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Booking not found or does not belong to you"
            )

        if booking.status != "completed":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Can only review completed bookings"
            )

        existing_review = db.query(Review).filter(Review.booking_id == booking_id).first()
        if existing_review:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A review already exists for this booking"
            )

        barber = db.query(Barber).filter(Barber.id == booking.barber_id).first()
        if not barber:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Barber not found"
            )

        try:
            db_review = Review(
                booking_id=booking_id,
                barber_id=barber.id,
                rating=review.rating,
                comment=review.comment
            )
            db.add(db_review)
            barber.rating, barber.total_ratings = updated_rating(
                barber.rating, barber.total_ratings, review.rating
            )
            db.commit()
            db.refresh(db_review)
            logger.info(
                f"Review created: {db_review.id} for booking {booking_id}; "
                f"barber {barber.id} now rated {barber.rating} ({barber.total_ratings})"
            )
            return db_review

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating review: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while creating review"
            )

    @staticmethod
    def get_barber_reviews(db: Session, barber_id: str, skip: int = 0, limit: int = 100) -> List[ReviewWithDetails]:
        reviews = (
            db.query(Review)
            .filter(Review.barber_id == barber_id)
            .order_by(Review.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return [
            ReviewWithDetails(
                id=review.id,
                booking_id=review.booking_id,
                barber_id=review.barber_id,
                rating=review.rating,
                comment=review.comment,
                created_at=review.created_at,
                customer_name=review.customer.name if review.customer else None,
                service_name=review.booking.service_name if review.booking else None,
            )
            for review in reviews
        ]


review_crud = ReviewCRUD()
