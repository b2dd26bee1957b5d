from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import Dict, List, Optional, Tuple
from datetime import date, datetime, time
from decimal import Decimal
from barberbook.models.booking_model import Booking
from barberbook.models.service_model import Service
from barberbook.models.user_model import User
from barberbook.schemas.booking_schema import (
    BookingCheckout,
    BookingResponse,
    BookingStatus,
    BookingWithDetails,
)
from barberbook.services.availability import generate_time_slots, is_selectable_date, BOOKING_WINDOW_DAYS
from barberbook.services.barber_crud import BarberCRUD
from barberbook.services.booking_status import DELETED, resolve_action
from barberbook.services.cart import SelectionCart
from barberbook.services.review_crud import removed_rating
from barberbook.logger import get_logger

logger = get_logger(__name__)

CLOSED_STATUSES = {BookingStatus.cancelled.value, BookingStatus.completed.value}


def booking_starts_at(booking: Booking) -> datetime:
    hour, minute = (int(part) for part in booking.time.split(":"))
    return datetime.combine(booking.date, time(hour, minute))


def is_upcoming(booking: Booking, now: datetime) -> bool:
    return booking.status not in CLOSED_STATUSES and booking_starts_at(booking) >= now


def filter_customer_bookings(bookings: List[Booking], booking_filter: str, now: datetime) -> List[Booking]:
    if booking_filter == "upcoming":
        return [booking for booking in bookings if is_upcoming(booking, now)]
    if booking_filter == "past":
        return [booking for booking in bookings if not is_upcoming(booking, now)]
    return list(bookings)


def count_by_status(bookings: List[Booking]) -> Dict[str, int]:
    counts = {"all": len(bookings)}
    for booking_status in BookingStatus:
        counts[booking_status.value] = 0
    for booking in bookings:
        counts[booking.status] = counts.get(booking.status, 0) + 1
    return counts


class BookingCRUD:
    @staticmethod
    def create_bookings(
            db: Session, checkout: BookingCheckout, customer: User, today: date
    ) -> Tuple[List[Booking], Decimal, int]:
        """Write one booking per selected service, all in a single transaction.

        Everything is validated before the first write; if any insert fails
        nothing is stored.
        """
        if customer.role != "customer":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only customers can book services"
            )

        try:
            cart = SelectionCart.from_mapping(checkout.services)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        if cart.is_empty():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Select at least one service"
            )

        if not is_selectable_date(checkout.date, today):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Please choose a date between today and {BOOKING_WINDOW_DAYS} days from now"
            )

        barber = BarberCRUD.get_active_barber(db, checkout.barber_id)
        if checkout.time not in generate_time_slots(barber.open_time, barber.close_time):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Selected time is not an available slot"
            )

        services = (
            db.query(Service)
            .filter(
                Service.id.in_(list(cart.items)),
                Service.barber_id == barber.id,
                Service.is_active == True,
            )
            .all()
        )
        services_by_id = {service.id: service for service in services}
        missing = [service_id for service_id in cart.items if service_id not in services_by_id]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Service not found or is inactive: {', '.join(missing)}"
            )

        try:
            bookings = []
            for service_id, quantity in cart.items.items():
                service = services_by_id[service_id]
                db_booking = Booking(
                    customer_id=str(customer.id),
                    barber_id=barber.id,
                    service_id=service.id,
                    service_name=service.name,
                    service_price=service.price,
                    quantity=quantity,
                    date=checkout.date,
                    time=checkout.time,
                    status=BookingStatus.pending.value,
                    notes=checkout.notes or None,
                )
                db.add(db_booking)
                bookings.append(db_booking)

            db.commit()
            for db_booking in bookings:
                db.refresh(db_booking)

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating bookings for customer {customer.id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create booking. No appointment was saved, please try again."
            )

        catalog = {service_id: service.price for service_id, service in services_by_id.items()}
        logger.info(
            f"{len(bookings)} booking(s) created by customer {customer.id} "
            f"with barber {barber.id} on {checkout.date} {checkout.time}"
        )
        return bookings, cart.total_price(catalog), cart.total_items()

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def list_customer_bookings(
            db: Session, customer_id: str, booking_filter: str, now: datetime
    ) -> List[Booking]:
        bookings = (
            db.query(Booking)
            .filter(Booking.customer_id == customer_id)
            .order_by(Booking.date.desc(), Booking.time.desc())
            .all()
        )
        return filter_customer_bookings(bookings, booking_filter, now)

    @staticmethod
    def list_barber_bookings(
            db: Session, barber_id: str, status_filter: Optional[str] = None
    ) -> Tuple[List[Booking], Dict[str, int]]:
        """Incoming bookings, optionally narrowed to one status, plus counts per status"""
        bookings = (
            db.query(Booking)
            .filter(Booking.barber_id == barber_id)
            .order_by(Booking.date.desc(), Booking.time.desc())
            .all()
        )
        counts = count_by_status(bookings)
        if status_filter and status_filter != "all":
            bookings = [booking for booking in bookings if booking.status == status_filter]
        return bookings, counts

    @staticmethod
    def apply_action(
            db: Session, booking_id: str, user: User, action: str, confirm: bool = False
    ) -> Optional[Booking]:
        """Move a booking through its lifecycle; returns None once it is deleted"""
        db_booking = BookingCRUD.get_booking_by_id(db, booking_id)
        if not db_booking:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
            )

        party_id = db_booking.barber_id if user.role == "barber" else db_booking.customer_id
        if party_id != str(user.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to manage this booking",
            )

        target = resolve_action(action, user.role, db_booking.status, confirm)

        try:
            if target == DELETED:
                # The review is deleted with the booking; take it out of the shop rating
                if db_booking.review is not None and db_booking.barber is not None:
                    barber = db_booking.barber
                    barber.rating, barber.total_ratings = removed_rating(
                        barber.rating, barber.total_ratings, db_booking.review.rating
                    )
                db.delete(db_booking)
                db.commit()
                logger.info(f"Booking deleted: {booking_id} by {user.role} {user.id}")
                return None

            previous = db_booking.status
            db_booking.status = target
            db.commit()
            db.refresh(db_booking)
            logger.info(f"Booking {booking_id}: {previous} -> {target} ({action} by {user.role} {user.id})")
            return db_booking

        except Exception as e:
            db.rollback()
            logger.error(f"Error applying {action} to booking {booking_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to {action} booking",
            )

    @staticmethod
    def with_details(booking: Booking) -> BookingWithDetails:
        return BookingWithDetails(
            **BookingResponse.model_validate(booking).model_dump(),
            shop_name=booking.barber.shop_name if booking.barber else None,
            customer_name=booking.customer.name if booking.customer else None,
            reviewed=booking.review is not None,
        )


booking_crud = BookingCRUD()
