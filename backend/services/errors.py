"""Reservation domain errors.

Each error carries the HTTP status it maps to; ``backend.main`` registers a
handler that turns them into ``{"detail": ...}`` responses.
"""

from fastapi import status


class ReservationError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Reservation request failed.'

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ReservationValidationError(ReservationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid reservation.'


class SpaceNotFoundError(ReservationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Co-working space not found.'


class ReservationNotFoundError(ReservationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Reservation not found.'


class NotOwnerError(ReservationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Only the user who made this reservation can change it.'


class SlotUnavailableError(ReservationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This time slot is already booked.'


class AlreadyCancelledError(ReservationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This reservation has already been cancelled.'
