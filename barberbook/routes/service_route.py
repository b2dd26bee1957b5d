from fastapi import APIRouter, Depends, File, HTTPException, status, Query, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional
from barberbook.services.barber_crud import barber_crud
from barberbook.services.cart import SelectionCart
from barberbook.services.service_crud import service_crud
from barberbook.schemas.service_schema import (
    CartQuoteLine,
    CartQuoteResponse,
    CartRequest,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from barberbook.database import get_db
from barberbook.security.auth import get_current_barber
from barberbook.models.user_model import User
from barberbook.utils.storage import BlobStorage, get_storage
from barberbook.logger import get_logger

service_router = APIRouter()
logger = get_logger(__name__)


# Declared before /barbers/{barber_id}/services so "me" is not taken for an id
@service_router.get(
    "/barbers/me/services",
    response_model=List[ServiceResponse],
    status_code=status.HTTP_200_OK
)
def get_my_services(current_user: User = Depends(get_current_barber), db: Session = Depends(get_db)):
    """All services of the current barber, inactive ones included"""
    barber = barber_crud.get_own_profile(db, current_user)
    return [ServiceResponse.model_validate(s) for s in service_crud.get_services_by_barber(db, barber.id)]


# PUBLIC ENDPOINTS

@service_router.get(
    "/barbers/{barber_id}/services",
    response_model=List[ServiceResponse],
    status_code=status.HTTP_200_OK
)
def get_barber_services(
        barber_id: str,
        q: Optional[str] = Query(None, description="Search in service name and description"),
        db: Session = Depends(get_db),
):
    """Bookable services of a barber"""
    barber = barber_crud.get_active_barber(db, barber_id)
    services = service_crud.get_active_services(db, barber.id, q=q)
    return [ServiceResponse.model_validate(service) for service in services]


@service_router.post(
    "/barbers/{barber_id}/quote",
    response_model=CartQuoteResponse,
    status_code=status.HTTP_200_OK
)
def quote_cart(barber_id: str, cart_request: CartRequest, db: Session = Depends(get_db)):
    """Price a cart against the barber's current catalog"""
    barber = barber_crud.get_active_barber(db, barber_id)
    try:
        cart = SelectionCart.from_mapping(cart_request.services)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    catalog = {service.id: service for service in service_crud.get_active_services(db, barber.id)}
    lines = []
    missing = []
    for service_id, quantity in cart.items.items():
        service = catalog.get(service_id)
        if service is None:
            missing.append(service_id)
            continue
        lines.append(CartQuoteLine(
            service_id=service.id,
            name=service.name,
            price=float(service.price),
            quantity=quantity,
            subtotal=float(service.price * quantity),
        ))

    total_price = cart.total_price({service_id: service.price for service_id, service in catalog.items()})
    return CartQuoteResponse(
        lines=lines,
        missing_service_ids=missing,
        total_price=float(total_price),
        total_items=cart.total_items(),
    )


# BARBER ENDPOINTS - Barbers manage their own catalog

@service_router.post(
    "/services",
    response_model=ServiceResponse,
    status_code=status.HTTP_201_CREATED
)
def create_service(
        service: ServiceCreate,
        current_user: User = Depends(get_current_barber),
        db: Session = Depends(get_db),
):
    try:
        logger.info(f"Barber {current_user.email} creating service: {service.name}")
        barber = barber_crud.get_own_profile(db, current_user)
        db_service = service_crud.create_service(db, service, barber)
        return ServiceResponse.model_validate(db_service)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating service: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error occurred while creating service"
        )


@service_router.patch(
    "/services/{service_id}",
    response_model=ServiceResponse,
    status_code=status.HTTP_200_OK
)
def update_service(
        service_id: str,
        service_update: ServiceUpdate,
        current_user: User = Depends(get_current_barber),
        db: Session = Depends(get_db),
):
    logger.info(f"Barber {current_user.email} updating service {service_id}")
    db_service = service_crud.update_service(db, service_id, service_update, str(current_user.id))
    return ServiceResponse.model_validate(db_service)


@service_router.delete(
    "/services/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT
)
def delete_service(
        service_id: str,
        current_user: User = Depends(get_current_barber),
        db: Session = Depends(get_db),
        storage: BlobStorage = Depends(get_storage),
):
    logger.info(f"Barber {current_user.email} deleting service {service_id}")
    service_crud.delete_service(db, service_id, str(current_user.id), storage)


@service_router.post(
    "/services/{service_id}/image",
    response_model=ServiceResponse,
    status_code=status.HTTP_200_OK
)
def upload_service_image(
        service_id: str,
        file: UploadFile = File(...),
        current_user: User = Depends(get_current_barber),
        db: Session = Depends(get_db),
        storage: BlobStorage = Depends(get_storage),
):
    data = file.file.read()
    logger.info(f"Barber {current_user.email} uploading image for service {service_id}")
    db_service = service_crud.set_service_image(
        db, service_id, str(current_user.id), file.filename, file.content_type, data, storage
    )
    return ServiceResponse.model_validate(db_service)
