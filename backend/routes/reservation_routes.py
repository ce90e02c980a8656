from datetime import date, datetime
from datetime import date as date_type
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user, require_role
from backend.database import MAX_ID, ensure_reservation_schema, get_db
from backend.models.user import ROLE_ADMIN, User
from backend.services import reservation_service

router = APIRouter(tags=['reservations'])

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class CreateReservationRequest(BaseModel):
    coworking_space: int = Field(gt=0, le=MAX_ID)
    date: date
    time_slot: str

    @field_validator('time_slot')
    @classmethod
    def validate_time_slot(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Time slot is required.')
        return normalized


class UpdateReservationRequest(BaseModel):
    coworking_space: int | None = Field(default=None, gt=0, le=MAX_ID)
    date: date_type | None = None
    time_slot: str | None = None
    status: str | None = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lower()
        if normalized not in {'active', 'cancelled'}:
            raise ValueError('Status must be active or cancelled.')
        return normalized


class SpaceSummaryResponse(BaseModel):
    id: int
    name: str
    location: str

    class Config:
        from_attributes = True


class UserSummaryResponse(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class ReservationResponse(BaseModel):
    id: int
    date: date
    time_slot: str
    status: str
    created_at: datetime | None = None
    coworking_space: SpaceSummaryResponse
    user: UserSummaryResponse

    class Config:
        from_attributes = True


def ensure_database_ready() -> None:
    try:
        ensure_reservation_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def database_unavailable(db: Session, exc: SQLAlchemyError) -> HTTPException:
    db.rollback()
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def reservation_payload(reservation) -> ReservationResponse:
    return ReservationResponse.model_validate(reservation)


def reservation_list_payload(reservations) -> dict:
    return {
        'success': True,
        'count': len(reservations),
        'data': [reservation_payload(reservation) for reservation in reservations],
    }


@router.get('')
def list_reservations(
    status_filter: str | None = Query(default=None, alias='status'),
    coworking_space: int | None = Query(default=None, gt=0, le=MAX_ID),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
):
    ensure_database_ready()

    try:
        reservations = reservation_service.list_reservations(
            db,
            status=status_filter,
            space_id=coworking_space,
            search=search,
        )
        return reservation_list_payload(reservations)
    except SQLAlchemyError as exc:
        raise database_unavailable(db, exc) from exc


@router.post('', status_code=status.HTTP_201_CREATED)
def create_reservation(
    data: CreateReservationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready()

    try:
        reservation = reservation_service.create_reservation(
            db,
            current_user,
            data.coworking_space,
            data.date,
            data.time_slot,
        )
        return {'success': True, 'data': reservation_payload(reservation)}
    except SQLAlchemyError as exc:
        raise database_unavailable(db, exc) from exc


@router.get('/my')
def list_my_reservations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready()

    try:
        reservations = reservation_service.list_my_reservations(db, current_user)
        return reservation_list_payload(reservations)
    except SQLAlchemyError as exc:
        raise database_unavailable(db, exc) from exc


@router.get('/booked/{coworking_space}/{reservation_date}')
def list_booked_slots(
    coworking_space: Annotated[int, Path(gt=0, le=MAX_ID)],
    reservation_date: date,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready()

    try:
        booked_slots = reservation_service.list_booked_slots(db, coworking_space, reservation_date)
        return {'success': True, 'count': len(booked_slots), 'data': booked_slots}
    except SQLAlchemyError as exc:
        raise database_unavailable(db, exc) from exc


@router.get('/{reservation_id}')
def get_reservation(
    reservation_id: int = Path(gt=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready()

    try:
        reservation = reservation_service.get_reservation(db, current_user, reservation_id)
        return {'success': True, 'data': reservation_payload(reservation)}
    except SQLAlchemyError as exc:
        raise database_unavailable(db, exc) from exc


@router.put('/{reservation_id}')
def update_reservation(
    reservation_id: Annotated[int, Path(gt=0, le=MAX_ID)],
    data: UpdateReservationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
):
    ensure_database_ready()

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if 'coworking_space' in changes:
        changes['coworking_space_id'] = changes.pop('coworking_space')

    try:
        reservation = reservation_service.update_reservation(db, reservation_id, changes)
        return {'success': True, 'data': reservation_payload(reservation)}
    except SQLAlchemyError as exc:
        raise database_unavailable(db, exc) from exc


@router.delete('/{reservation_id}')
def delete_reservation(
    reservation_id: int = Path(gt=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
):
    ensure_database_ready()

    try:
        reservation_service.delete_reservation(db, reservation_id)
        return {'success': True, 'data': {}}
    except SQLAlchemyError as exc:
        raise database_unavailable(db, exc) from exc


@router.put('/{reservation_id}/cancel')
def cancel_reservation(
    reservation_id: int = Path(gt=0, le=MAX_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready()

    try:
        reservation = reservation_service.cancel_reservation(db, current_user, reservation_id)
        return {'success': True, 'data': reservation_payload(reservation)}
    except SQLAlchemyError as exc:
        raise database_unavailable(db, exc) from exc
