from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from barberbook.models.barber_model import Barber
from barberbook.models.user_model import User
from barberbook.schemas.barber_schema import BarberProfileIn
from barberbook.utils.geo import calculate_distance, format_distance
from barberbook.utils.geolocation import GeoPosition
from barberbook.utils.storage import BlobStorage, StorageError, build_blob_path, validate_image_file
from barberbook.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_DISTANCE_KM = 50.0


@dataclass
class DirectoryEntry:
    barber: Barber
    distance_km: Optional[float] = None

    @property
    def distance_label(self) -> Optional[str]:
        if self.distance_km is None:
            return None
        return format_distance(self.distance_km)


def attach_distances(barbers: Sequence[Barber], position: GeoPosition) -> List[DirectoryEntry]:
    """Pair each barber with its distance; nearest first when the position is known.

    Without a position the distance stays None and fetch order is kept.
    """
    if not position.known:
        return [DirectoryEntry(barber) for barber in barbers]

    entries = [
        DirectoryEntry(
            barber,
            calculate_distance(position.latitude, position.longitude, barber.latitude, barber.longitude),
        )
        for barber in barbers
    ]
    # sorted() is stable, so ties keep fetch order
    return sorted(entries, key=lambda entry: entry.distance_km)


def apply_filters(
        entries: Sequence[DirectoryEntry],
        location_known: bool,
        category: Optional[str] = None,
        search: Optional[str] = None,
        max_distance: float = DEFAULT_MAX_DISTANCE_KM,
        min_rating: float = 0,
) -> List[DirectoryEntry]:
    """Filter a fetched directory without touching the list passed in"""
    result = list(entries)

    # category is accepted but barbers carry no categories yet, so it filters nothing

    if search:
        needle = search.strip().lower()
        result = [
            entry for entry in result
            if needle in (entry.barber.shop_name or "").lower()
            or needle in (entry.barber.address or "").lower()
        ]

    if location_known and max_distance is not None:
        result = [
            entry for entry in result
            if entry.distance_km is not None and entry.distance_km <= max_distance
        ]

    if min_rating:
        result = [entry for entry in result if (entry.barber.rating or 0) >= min_rating]

    return result


class BarberCRUD:
    @staticmethod
    def get_active_barbers(db: Session) -> List[Barber]:
        try:
            return (
                db.query(Barber)
                .filter(Barber.is_active == True)
                .order_by(Barber.created_at.asc())
                .all()
            )
        except Exception as e:
            logger.error(f"Error fetching barbers: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to load barbers. Please try again."
            )

    @staticmethod
    def list_directory(
            db: Session,
            position: GeoPosition,
            category: Optional[str] = None,
            search: Optional[str] = None,
            max_distance: float = DEFAULT_MAX_DISTANCE_KM,
            min_rating: float = 0,
    ) -> List[DirectoryEntry]:
        entries = attach_distances(BarberCRUD.get_active_barbers(db), position)
        return apply_filters(
            entries,
            location_known=position.known,
            category=category,
            search=search,
            max_distance=max_distance,
            min_rating=min_rating,
        )

    @staticmethod
    def get_barber(db: Session, barber_id: str) -> Barber:
        barber = db.query(Barber).filter(Barber.id == barber_id).first()
        if not barber:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Barber not found"
            )
        return barber

    @staticmethod
    def get_active_barber(db: Session, barber_id: str) -> Barber:
        barber = BarberCRUD.get_barber(db, barber_id)
        if not barber.is_active:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Barber not found"
            )
        return barber

    @staticmethod
    def get_own_profile(db: Session, user: User) -> Barber:
        barber = db.query(Barber).filter(Barber.id == str(user.id)).first()
        if not barber:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Complete your barber profile first"
            )
        return barber

    @staticmethod
    def upsert_profile(db: Session, user: User, profile: BarberProfileIn) -> Barber:
        """Create the barber profile on first save, overwrite it afterwards"""
        db_barber = db.query(Barber).filter(Barber.id == str(user.id)).first()
        created = db_barber is None
        try:
            if created:
                db_barber = Barber(
                    id=str(user.id),
                    images=[],
                    rating=0.0,
                    total_ratings=0,
                    is_active=True,
                    **profile.model_dump(),
                )
                db.add(db_barber)
            else:
                for key, value in profile.model_dump().items():
                    setattr(db_barber, key, value)
                db_barber.updated_at = datetime.now(timezone.utc)

            db.commit()
            db.refresh(db_barber)
            logger.info(f"Barber profile {'created' if created else 'updated'}: {db_barber.id}")
            return db_barber

        except Exception as e:
            db.rollback()
            logger.error(f"Error saving barber profile for {user.id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while saving barber profile"
            )

    @staticmethod
    def add_image(
            db: Session,
            barber: Barber,
            filename: str,
            content_type: Optional[str],
            data: bytes,
            storage: BlobStorage,
    ) -> Barber:
        is_valid, error = validate_image_file(content_type, len(data))
        if not is_valid:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

        try:
            url = storage.upload(build_blob_path("barbers", barber.id, filename), data, content_type)
        except StorageError as e:
            logger.error(f"Error uploading image for barber {barber.id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to upload image"
            )

        try:
            # Reassign so the JSON column registers the change
            barber.images = [*(barber.images or []), url]
            barber.updated_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(barber)
            logger.info(f"Image added to barber {barber.id}: {url}")
            return barber

        except Exception as e:
            db.rollback()
            logger.error(f"Error saving image list for barber {barber.id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while saving image"
            )

    @staticmethod
    def remove_image(db: Session, barber: Barber, image_url: str, storage: BlobStorage) -> Barber:
        """Delete the blob, then drop it from the gallery list.

        If the list update fails the blob is already gone; nothing restores it.
        """
        if image_url not in (barber.images or []):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Image not found in gallery"
            )

        try:
            storage.delete(image_url)
        except StorageError as e:
            logger.error(f"Error deleting image {image_url}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete image"
            )

        try:
            barber.images = [url for url in barber.images if url != image_url]
            barber.updated_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(barber)
            logger.info(f"Image removed from barber {barber.id}: {image_url}")
            return barber

        except Exception as e:
            db.rollback()
            logger.error(f"Error updating image list for barber {barber.id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while removing image"
            )


barber_crud = BarberCRUD()
