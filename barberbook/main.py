from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from barberbook import config
from barberbook.database import Base, SessionLocal, engine
from barberbook.middleware import add_request_id_and_process_time
from barberbook.models import barber_model, booking_model, review_model, service_model, token_blacklist, user_model  # noqa: F401
from barberbook.routes.user_route import user_router
from barberbook.routes.barber_route import barber_router
from barberbook.routes.service_route import service_router
from barberbook.routes.booking_route import booking_router
from barberbook.routes.review_route import review_router
from barberbook.utils.token_blacklist import token_blacklist_service
from barberbook.logger import get_logger

logger = get_logger(__name__)

Base.metadata.create_all(bind=engine)


def purge_expired_tokens():
    db = SessionLocal()
    try:
        token_blacklist_service.cleanup_expired_tokens(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    purge_expired_tokens()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="BarberBook API",
    version="1.0.0",
    description="Booking marketplace API: customers find nearby barbers, fill a cart of services and book a slot; "
                "barbers manage their shop profile, gallery, catalog and incoming bookings.",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(add_request_id_and_process_time)


@app.get("/", status_code=200)
async def home():
    return {"message": "Welcome to BarberBook REST API"}


app.include_router(user_router, prefix="/api", tags=["Users"])
app.include_router(barber_router, prefix="/api", tags=["Barbers"])
app.include_router(service_router, prefix="/api", tags=["Services"])
app.include_router(booking_router, prefix="/api", tags=["Bookings"])
app.include_router(review_router, prefix="/api", tags=["Reviews"])
