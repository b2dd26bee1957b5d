from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from barberbook.models.service_model import Service
from barberbook.models.barber_model import Barber
from barberbook.schemas.service_schema import ServiceCreate, ServiceUpdate
from barberbook.utils.storage import BlobStorage, StorageError, build_blob_path, validate_image_file
from barberbook.logger import get_logger

logger = get_logger(__name__)


def search_services(services: List[Service], q: Optional[str]) -> List[Service]:
    """Case-insensitive substring match on name or description"""
    if not q or not q.strip():
        return list(services)
    needle = q.strip().lower()
    return [
        service for service in services
        if needle in (service.name or "").lower() or needle in (service.description or "").lower()
    ]


class ServiceCRUD:
    @staticmethod
    def create_service(db: Session, service: ServiceCreate, barber: Barber) -> Service:
        """Create a new service"""
        try:
            db_service = Service(
                barber_id=barber.id,
                name=service.name,
                description=service.description,
                price=service.price,
                duration_minutes=service.duration_minutes,
                is_active=True,
            )
            db.add(db_service)
            db.commit()
            db.refresh(db_service)
            logger.info(f"Service created: {service.name} by barber {barber.id}")
            return db_service

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating service: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while creating service"
            )

    @staticmethod
    def get_service_by_id(db: Session, service_id: str) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_active_services(db: Session, barber_id: str, q: Optional[str] = None) -> List[Service]:
        """Services a customer can book with this barber"""
        try:
            services = (
                db.query(Service)
                .filter(Service.barber_id == barber_id, Service.is_active == True)
                .order_by(Service.created_at.asc())
                .all()
            )
        except Exception as e:
            logger.error(f"Error fetching services for barber {barber_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to load services"
            )
        return search_services(services, q)

    @staticmethod
    def get_services_by_barber(db: Session, barber_id: str) -> List[Service]:
        """All services of a barber, inactive ones included"""
        return (
            db.query(Service)
            .filter(Service.barber_id == barber_id)
            .order_by(Service.created_at.asc())
            .all()
        )

    @staticmethod
    def _get_owned_service(db: Session, service_id: str, barber_id: str, action: str) -> Service:
        db_service = ServiceCRUD.get_service_by_id(db, service_id)
        if not db_service:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Service not found"
            )
        if db_service.barber_id != barber_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not authorized to {action} this service"
            )
        return db_service

    @staticmethod
    def update_service(db: Session, service_id: str, service_update: ServiceUpdate, barber_id: str) -> Service:
        db_service = ServiceCRUD._get_owned_service(db, service_id, barber_id, "update")

        try:
            # Update only provided fields
            for key, value in service_update.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(db_service, key, value)

            db.commit()
            db.refresh(db_service)
            logger.info(f"Service updated: {service_id}")
            return db_service

        except Exception as e:
            db.rollback()
            logger.error(f"Error updating service {service_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while updating service"
            )

    @staticmethod
    def delete_service(db: Session, service_id: str, barber_id: str, storage: BlobStorage) -> None:
        """Remove the service image, then the service itself.

        Bookings keep their own copy of the name and price, so they are unaffected.
        """
        db_service = ServiceCRUD._get_owned_service(db, service_id, barber_id, "delete")

        if db_service.image_url:
            try:
                storage.delete(db_service.image_url)
            except StorageError as e:
                logger.error(f"Error deleting image of service {service_id}: {str(e)}")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to delete service image"
                )

        try:
            db.delete(db_service)
            db.commit()
            logger.info(f"Service deleted: {service_id}")

        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting service {service_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while deleting service"
            )

    @staticmethod
    def set_service_image(
            db: Session,
            service_id: str,
            barber_id: str,
            filename: str,
            content_type: Optional[str],
            data: bytes,
            storage: BlobStorage,
    ) -> Service:
        """Upload a picture for a service, replacing the previous one"""
        db_service = ServiceCRUD._get_owned_service(db, service_id, barber_id, "update")

        is_valid, error = validate_image_file(content_type, len(data))
        if not is_valid:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

        previous_url = db_service.image_url
        try:
            url = storage.upload(build_blob_path("services", barber_id, filename), data, content_type)
            if previous_url:
                storage.delete(previous_url)
        except StorageError as e:
            logger.error(f"Error storing image for service {service_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to upload image"
            )

        try:
            db_service.image_url = url
            db.commit()
            db.refresh(db_service)
            logger.info(f"Service image updated: {service_id}")
            return db_service

        except Exception as e:
            db.rollback()
            logger.error(f"Error saving image of service {service_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while saving service image"
            )


service_crud = ServiceCRUD()
