"""FastAPI application entry point."""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from venue_booking.config import settings
from venue_booking.database import Base, engine

# Import routers
from venue_booking.routers import users, venues, bookings, change_requests

# Import all models so Base.metadata knows about them
from venue_booking.models.user import User                          # noqa: F401
from venue_booking.models.venue import Venue                        # noqa: F401
from venue_booking.models.booking import Booking                    # noqa: F401
from venue_booking.models.booking_mutation import BookingMutation   # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title=settings.APP_NAME,
    description="Venue marketplace bookings — change requests with prorated pricing",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(venues.router, prefix="/api/venues", tags=["Venues"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(change_requests.router, prefix="/api/bookings", tags=["ChangeRequests"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
