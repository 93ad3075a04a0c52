"""Venue API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from venue_booking.database import get_db
from venue_booking.models.user import User
from venue_booking.models.venue import Venue
from venue_booking.schemas.venue import VenueCreate, VenueOut
from venue_booking.services import booking_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=VenueOut, status_code=status.HTTP_201_CREATED)
def create_venue(payload: VenueCreate, db: Session = Depends(get_db)):
    owner = db.query(User).filter(User.user_id == payload.owner_id).first()
    if not owner:
        raise HTTPException(status_code=404, detail="Owner user not found")

    venue = Venue(**payload.model_dump())
    db.add(venue)
    db.commit()
    db.refresh(venue)
    logger.info("Created venue %s (%s) owned by %s", venue.venue_id, venue.title, venue.owner_id)
    return venue


@router.get("/{venue_id}", response_model=VenueOut)
def get_venue(venue_id: str, db: Session = Depends(get_db)):
    return booking_service.get_venue(db, venue_id)
