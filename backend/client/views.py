"""Presentation helpers shared by the reservation pages."""

from datetime import date, datetime


def _parse_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def slot_end_hour(time_slot: str) -> int:
    return int(time_slot.split(' - ')[1].split(':')[0])


def is_upcoming(reservation_date: date | str, time_slot: str, now: datetime | None = None) -> bool:
    """True while the slot has not finished yet.

    On the reservation day itself a slot counts as upcoming until the hour it
    ends in has started.
    """
    now = now or datetime.now()
    day = _parse_date(reservation_date)

    if day < now.date():
        return False
    if day > now.date():
        return True
    return now.hour < slot_end_hour(time_slot)


def can_cancel(reservation: dict, now: datetime | None = None) -> bool:
    return reservation.get('status') == 'active' and is_upcoming(
        reservation['date'], reservation['time_slot'], now
    )


def format_date(value: date | str) -> str:
    # e.g. "Wed, Jan 10, 2024"
    day = _parse_date(value)
    return f'{day.strftime("%a, %b")} {day.day}, {day.year}'


def filter_reservations(reservations: list[dict], status: str = 'all', search: str = '') -> list[dict]:
    filtered = list(reservations)

    if status != 'all':
        filtered = [reservation for reservation in filtered if reservation.get('status') == status]

    term = search.strip().lower()
    if term:
        filtered = [
            reservation
            for reservation in filtered
            if any(
                term in (value or '').lower()
                for value in (
                    reservation.get('user', {}).get('name'),
                    reservation.get('user', {}).get('email'),
                    reservation.get('coworking_space', {}).get('name'),
                    reservation.get('coworking_space', {}).get('location'),
                )
            )
        ]

    return filtered
