"""Reservation booking, cancellation and lookup.

Slot occupancy is guarded by the ``uq_reservations_active_slot`` partial
unique index: the read checks below only produce friendlier errors, the
database decides which of two competing bookings wins.
"""

import logging
import re
from datetime import date

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.core import config
from backend.models.coworking_space import CoworkingSpace
from backend.models.reservation import STATUS_ACTIVE, STATUS_CANCELLED, STATUSES, Reservation
from backend.models.user import User
from backend.services.errors import (
    AlreadyCancelledError,
    NotOwnerError,
    ReservationNotFoundError,
    ReservationValidationError,
    SlotUnavailableError,
    SpaceNotFoundError,
)

logger = logging.getLogger(__name__)

ACTIVE_SLOT_INDEX = 'uq_reservations_active_slot'
TIME_SLOT_PATTERN = re.compile(r'^\s*(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})\s*$')
UPDATABLE_FIELDS = {'coworking_space_id', 'date', 'time_slot', 'status'}


def normalize_time_slot(time_slot: str) -> str:
    """Return ``time_slot`` as a zero-padded ``HH:MM - HH:MM`` label."""
    match = TIME_SLOT_PATTERN.match(time_slot or '')
    if not match:
        raise ReservationValidationError('Time slot must look like "09:00 - 11:00".')

    start_hour, start_minute, end_hour, end_minute = (int(part) for part in match.groups())
    for hour, minute in ((start_hour, start_minute), (end_hour, end_minute)):
        if hour > 23 or minute > 59:
            raise ReservationValidationError('Time slot contains an invalid time of day.')

    if (start_hour, start_minute) >= (end_hour, end_minute):
        raise ReservationValidationError('Time slot must end after it starts.')

    return f'{start_hour:02d}:{start_minute:02d} - {end_hour:02d}:{end_minute:02d}'


def get_space_or_raise(db: Session, space_id: int) -> CoworkingSpace:
    space = db.get(CoworkingSpace, space_id)
    if space is None:
        raise SpaceNotFoundError()
    return space


def get_reservation_or_raise(db: Session, reservation_id: int) -> Reservation:
    reservation = db.get(Reservation, reservation_id)
    if reservation is None:
        raise ReservationNotFoundError()
    return reservation


def is_active_slot_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig or exc)
    return ACTIVE_SLOT_INDEX in message or 'reservations.time_slot' in message


def find_active_reservation(
    db: Session,
    space_id: int,
    reservation_date: date,
    time_slot: str,
) -> Reservation | None:
    return db.query(Reservation).filter(
        Reservation.coworking_space_id == space_id,
        Reservation.date == reservation_date,
        Reservation.time_slot == time_slot,
        Reservation.status == STATUS_ACTIVE,
    ).first()


def list_booked_slots(db: Session, space_id: int, reservation_date: date) -> list[str]:
    get_space_or_raise(db, space_id)

    rows = db.query(Reservation.time_slot).filter(
        Reservation.coworking_space_id == space_id,
        Reservation.date == reservation_date,
        Reservation.status == STATUS_ACTIVE,
    ).distinct().order_by(Reservation.time_slot.asc()).all()

    return [time_slot for (time_slot,) in rows]


def create_reservation(
    db: Session,
    user: User,
    space_id: int,
    reservation_date: date,
    time_slot: str,
) -> Reservation:
    slot = normalize_time_slot(time_slot)
    get_space_or_raise(db, space_id)

    for attempt in range(1, config.BOOKING_MAX_ATTEMPTS + 1):
        if find_active_reservation(db, space_id, reservation_date, slot) is not None:
            raise SlotUnavailableError()

        reservation = Reservation(
            user_id=user.id,
            coworking_space_id=space_id,
            date=reservation_date,
            time_slot=slot,
            status=STATUS_ACTIVE,
        )
        db.add(reservation)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if not is_active_slot_violation(exc):
                raise
            logger.warning(
                'Slot %s %s at space %s taken concurrently (attempt %s/%s)',
                reservation_date, slot, space_id, attempt, config.BOOKING_MAX_ATTEMPTS,
            )
            continue

        db.refresh(reservation)
        logger.info(
            'User %s booked space %s on %s %s (reservation %s)',
            user.id, space_id, reservation_date, slot, reservation.id,
        )
        return reservation

    raise SlotUnavailableError()


def cancel_reservation(db: Session, user: User, reservation_id: int) -> Reservation:
    reservation = get_reservation_or_raise(db, reservation_id)

    if reservation.user_id != user.id and not user.is_admin:
        raise NotOwnerError('Only the user who made this reservation can cancel it.')

    if reservation.status == STATUS_CANCELLED:
        raise AlreadyCancelledError()

    reservation.status = STATUS_CANCELLED
    db.commit()
    db.refresh(reservation)

    logger.info('User %s cancelled reservation %s', user.id, reservation.id)
    return reservation


def list_my_reservations(db: Session, user: User) -> list[Reservation]:
    return db.query(Reservation).filter(
        Reservation.user_id == user.id,
    ).order_by(
        Reservation.date.asc(),
        Reservation.time_slot.asc(),
        Reservation.id.asc(),
    ).all()


def list_reservations(
    db: Session,
    status: str | None = None,
    space_id: int | None = None,
    search: str | None = None,
) -> list[Reservation]:
    query = db.query(Reservation).join(Reservation.user).join(Reservation.coworking_space)

    status = (status or '').strip().lower()
    if status and status != 'all':
        if status not in STATUSES:
            raise ReservationValidationError('Status filter must be one of: all, active, cancelled.')
        query = query.filter(Reservation.status == status)

    if space_id is not None:
        query = query.filter(Reservation.coworking_space_id == space_id)

    term = (search or '').strip()
    if term:
        pattern = f'%{term}%'
        query = query.filter(
            or_(
                User.name.ilike(pattern),
                User.email.ilike(pattern),
                CoworkingSpace.name.ilike(pattern),
                CoworkingSpace.location.ilike(pattern),
            )
        )

    return query.order_by(
        Reservation.date.asc(),
        Reservation.time_slot.asc(),
        Reservation.id.asc(),
    ).all()


def get_reservation(db: Session, user: User, reservation_id: int) -> Reservation:
    reservation = get_reservation_or_raise(db, reservation_id)
    if reservation.user_id != user.id and not user.is_admin:
        raise NotOwnerError('Only the user who made this reservation can view it.')
    return reservation


def update_reservation(db: Session, reservation_id: int, changes: dict) -> Reservation:
    reservation = get_reservation_or_raise(db, reservation_id)

    unknown_fields = set(changes) - UPDATABLE_FIELDS
    if unknown_fields:
        raise ReservationValidationError(f'Cannot update fields: {", ".join(sorted(unknown_fields))}.')

    space_id = changes.get('coworking_space_id', reservation.coworking_space_id)
    reservation_date = changes.get('date', reservation.date)
    slot = normalize_time_slot(changes['time_slot']) if 'time_slot' in changes else reservation.time_slot
    new_status = changes.get('status', reservation.status)

    if new_status not in STATUSES:
        raise ReservationValidationError('Status must be active or cancelled.')
    if space_id != reservation.coworking_space_id:
        get_space_or_raise(db, space_id)

    if new_status == STATUS_ACTIVE:
        holder = find_active_reservation(db, space_id, reservation_date, slot)
        if holder is not None and holder.id != reservation.id:
            raise SlotUnavailableError()

    reservation.coworking_space_id = space_id
    reservation.date = reservation_date
    reservation.time_slot = slot
    reservation.status = new_status

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if is_active_slot_violation(exc):
            raise SlotUnavailableError() from exc
        raise

    db.refresh(reservation)
    logger.info('Reservation %s updated: %s', reservation.id, sorted(changes))
    return reservation


def delete_reservation(db: Session, reservation_id: int) -> None:
    reservation = get_reservation_or_raise(db, reservation_id)
    db.delete(reservation)
    db.commit()
    logger.info('Reservation %s deleted', reservation_id)
