from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from barberbook.database import get_db
from barberbook.models.user_model import User
from barberbook.schemas.barber_schema import (
    AvailabilityResponse,
    BarberDirectoryResponse,
    BarberListItem,
    BarberProfileIn,
    BarberResponse,
    RevenueResponse,
)
from barberbook.security.auth import get_current_barber
from barberbook.services.availability import (
    BOOKING_WINDOW_DAYS,
    booking_window,
    bucket_time_slots,
    generate_time_slots,
    is_selectable_date,
)
from barberbook.services.barber_crud import DEFAULT_MAX_DISTANCE_KM, barber_crud
from barberbook.services.revenue import get_revenue_summary
from barberbook.utils.geolocation import GeoPosition, get_client_position
from barberbook.utils.storage import BlobStorage, get_storage
from barberbook.logger import get_logger

barber_router = APIRouter()
logger = get_logger(__name__)


# PUBLIC DIRECTORY

@barber_router.get("/barbers", response_model=BarberDirectoryResponse, status_code=status.HTTP_200_OK)
def list_barbers(
        position: GeoPosition = Depends(get_client_position),
        search: Optional[str] = Query(None, description="Match shop name or address"),
        category: Optional[str] = Query(None, description="Reserved, does not filter yet"),
        max_distance: float = Query(DEFAULT_MAX_DISTANCE_KM, gt=0, description="Kilometers, used when location is known"),
        min_rating: float = Query(0, ge=0, le=5, description="Inclusive minimum rating, 0 for any"),
        db: Session = Depends(get_db),
):
    """Active barbers, nearest first when the caller's location is known"""
    logger.info(f"Listing barbers (location known: {position.known}, search: {search!r})")
    entries = barber_crud.list_directory(
        db,
        position,
        category=category,
        search=search,
        max_distance=max_distance,
        min_rating=min_rating,
    )
    items = [
        BarberListItem(
            **BarberResponse.model_validate(entry.barber).model_dump(),
            distance_km=entry.distance_km,
            distance_label=entry.distance_label,
        )
        for entry in entries
    ]
    return BarberDirectoryResponse(
        barbers=items,
        total=len(items),
        location_known=position.known,
        location_error=position.error,
    )


# BARBER SELF-SERVICE

@barber_router.get("/barbers/me", response_model=BarberResponse, status_code=status.HTTP_200_OK)
def get_my_profile(current_user: User = Depends(get_current_barber), db: Session = Depends(get_db)):
    return BarberResponse.model_validate(barber_crud.get_own_profile(db, current_user))


@barber_router.put("/barbers/me", response_model=BarberResponse, status_code=status.HTTP_200_OK)
def save_my_profile(
        profile: BarberProfileIn,
        current_user: User = Depends(get_current_barber),
        db: Session = Depends(get_db),
):
    """Create or overwrite the shop profile of the current barber"""
    logger.info(f"Barber {current_user.email} saving profile")
    return BarberResponse.model_validate(barber_crud.upsert_profile(db, current_user, profile))


@barber_router.post("/barbers/me/images", response_model=BarberResponse, status_code=status.HTTP_201_CREATED)
def upload_gallery_image(
        file: UploadFile = File(...),
        current_user: User = Depends(get_current_barber),
        db: Session = Depends(get_db),
        storage: BlobStorage = Depends(get_storage),
):
    barber = barber_crud.get_own_profile(db, current_user)
    data = file.file.read()
    logger.info(f"Barber {barber.id} uploading image {file.filename} ({len(data)} bytes)")
    barber = barber_crud.add_image(db, barber, file.filename, file.content_type, data, storage)
    return BarberResponse.model_validate(barber)


@barber_router.delete("/barbers/me/images", response_model=BarberResponse, status_code=status.HTTP_200_OK)
def delete_gallery_image(
        image_url: str = Query(..., description="URL of the gallery image to remove"),
        current_user: User = Depends(get_current_barber),
        db: Session = Depends(get_db),
        storage: BlobStorage = Depends(get_storage),
):
    barber = barber_crud.get_own_profile(db, current_user)
    logger.info(f"Barber {barber.id} deleting image {image_url}")
    return BarberResponse.model_validate(barber_crud.remove_image(db, barber, image_url, storage))


@barber_router.get("/barbers/me/revenue", response_model=RevenueResponse, status_code=status.HTTP_200_OK)
def get_my_revenue(
        period: str = Query("month", description="today, week, month or all"),
        current_user: User = Depends(get_current_barber),
        db: Session = Depends(get_db),
):
    try:
        return get_revenue_summary(db, str(current_user.id), period, date.today())
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error computing revenue for barber {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load revenue data"
        )


# PUBLIC PROVIDER PAGES

@barber_router.get("/barbers/{barber_id}", response_model=BarberResponse, status_code=status.HTTP_200_OK)
def get_barber(barber_id: str, db: Session = Depends(get_db)):
    return BarberResponse.model_validate(barber_crud.get_active_barber(db, barber_id))


@barber_router.get(
    "/barbers/{barber_id}/availability", response_model=AvailabilityResponse, status_code=status.HTTP_200_OK
)
def get_availability(
        barber_id: str,
        day: date = Query(..., alias="date", description="YYYY-MM-DD"),
        db: Session = Depends(get_db),
):
    """Bookable slots of a barber for one day inside the booking window"""
    today = date.today()
    if not is_selectable_date(day, today):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Date must be between today and {BOOKING_WINDOW_DAYS} days from now"
        )

    barber = barber_crud.get_active_barber(db, barber_id)
    slots = generate_time_slots(barber.open_time, barber.close_time)
    min_date, max_date = booking_window(today)
    return AvailabilityResponse(
        barber_id=barber.id,
        date=day,
        min_date=min_date,
        max_date=max_date,
        slots=slots,
        buckets=bucket_time_slots(slots),
    )
