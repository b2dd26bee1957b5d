from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date, datetime
from barberbook.services.booking_crud import booking_crud
from barberbook.schemas.booking_schema import (
    BarberBookingList,
    BookingAction,
    BookingActionRequest,
    BookingCheckout,
    BookingResponse,
    BookingStatus,
    BookingWithDetails,
    CheckoutResponse,
    CustomerBookingFilter,
)
from barberbook.database import get_db
from barberbook.security.auth import get_current_active_user, get_current_barber, get_current_customer
from barberbook.models.user_model import User
from barberbook.logger import get_logger

booking_router = APIRouter()
logger = get_logger(__name__)


# CUSTOMER ENDPOINTS

@booking_router.post(
    "/bookings", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED
)
def checkout(
    booking: BookingCheckout,
    current_user: User = Depends(get_current_customer),
    db: Session = Depends(get_db),
):
    """Book every service in the cart for one date and time"""
    try:
        logger.info(
            f"Customer {current_user.email} booking {len(booking.services)} service(s) "
            f"with barber {booking.barber_id} on {booking.date} {booking.time}"
        )
        bookings, total_price, total_items = booking_crud.create_bookings(
            db, booking, current_user, date.today()
        )
        return CheckoutResponse(
            bookings=[BookingResponse.model_validate(b) for b in bookings],
            total_price=float(total_price),
            total_items=total_items,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating booking: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error occurred while creating booking",
        )


@booking_router.get(
    "/bookings", response_model=List[BookingWithDetails], status_code=status.HTTP_200_OK
)
def get_my_bookings(
    booking_filter: CustomerBookingFilter = Query(
        CustomerBookingFilter.upcoming, alias="filter", description="all, upcoming or past"
    ),
    current_user: User = Depends(get_current_customer),
    db: Session = Depends(get_db),
):
    """The current customer's bookings"""
    try:
        logger.info(f"Customer {current_user.email} fetching {booking_filter.value} bookings")
        bookings = booking_crud.list_customer_bookings(
            db, str(current_user.id), booking_filter.value, datetime.now()
        )
        return [booking_crud.with_details(booking) for booking in bookings]

    except Exception as e:
        logger.error(f"Error fetching bookings for {current_user.email}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load bookings",
        )


# BARBER ENDPOINTS

@booking_router.get(
    "/barbers/me/bookings", response_model=BarberBookingList, status_code=status.HTTP_200_OK
)
def get_incoming_bookings(
    booking_status: Optional[BookingStatus] = Query(
        None, alias="status", description="Only bookings in this status"
    ),
    current_user: User = Depends(get_current_barber),
    db: Session = Depends(get_db),
):
    """Bookings made with the current barber, with a count per status"""
    try:
        logger.info(f"Barber {current_user.email} fetching bookings")
        bookings, counts = booking_crud.list_barber_bookings(
            db, str(current_user.id), booking_status.value if booking_status else None
        )
        return BarberBookingList(
            bookings=[booking_crud.with_details(booking) for booking in bookings],
            counts=counts,
        )

    except Exception as e:
        logger.error(f"Error fetching bookings for barber {current_user.email}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load bookings",
        )


# SHARED ENDPOINTS - either party of a booking

@booking_router.get(
    "/bookings/{booking_id}", response_model=BookingWithDetails, status_code=status.HTTP_200_OK
)
def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    booking = booking_crud.get_booking_by_id(db, booking_id)
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    if str(current_user.id) not in (booking.customer_id, booking.barber_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this booking",
        )
    return booking_crud.with_details(booking)


@booking_router.post(
    "/bookings/{booking_id}/actions/{action}", response_model=BookingResponse, status_code=status.HTTP_200_OK
)
def apply_booking_action(
    booking_id: str,
    action: BookingAction,
    action_request: Optional[BookingActionRequest] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Accept, reject, complete or cancel a booking"""
    confirm = action_request.confirm if action_request else False
    logger.info(f"{current_user.role} {current_user.email} requests {action.value} on booking {booking_id}")
    booking = booking_crud.apply_action(db, booking_id, current_user, action.value, confirm)
    return BookingResponse.model_validate(booking)


@booking_router.delete(
    "/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT
)
def delete_booking(
    booking_id: str,
    confirm: bool = Query(False, description="Confirm permanent removal"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Remove a completed or cancelled booking"""
    logger.info(f"{current_user.role} {current_user.email} deleting booking {booking_id}")
    booking_crud.apply_action(db, booking_id, current_user, "delete", confirm)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
