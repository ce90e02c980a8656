"""HTTP client for the reservations API.

Auth state lives in an explicit :class:`AuthSession` handed to the client, so
callers decide where a token is kept and when it is dropped.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

import httpx

from backend.core import config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request to the API failed; ``message`` is safe to show to users."""

    def __init__(self, message: str, status_code: int | None = None, detail=None):
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class NetworkError(ApiError):
    pass


class RequestTimeoutError(ApiError):
    pass


class UnauthorizedError(ApiError):
    pass


class ServerError(ApiError):
    pass


@dataclass
class AuthSession:
    token: str | None = None
    user: dict | None = field(default=None)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> str | None:
        return self.user.get('role') if self.user else None

    def clear(self) -> None:
        self.token = None
        self.user = None


def landing_path(user: dict | None) -> str:
    if user and user.get('role') == 'admin':
        return '/admin'
    return '/dashboard'


class ApiClient:
    def __init__(
        self,
        session: AuthSession | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.session = session if session is not None else AuthSession()
        self._http = httpx.Client(
            base_url=base_url or config.API_URL,
            headers={'Content-Type': 'application/json'},
            timeout=timeout if timeout is not None else config.API_TIMEOUT_SECONDS,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        headers = kwargs.pop('headers', {})
        if self.session.token:
            headers['Authorization'] = f'Bearer {self.session.token}'

        try:
            response = self._http.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError('Request timed out. Please try again.') from exc
        except httpx.TransportError as exc:
            raise NetworkError(
                'Unable to connect to the server. Please check your internet connection.'
            ) from exc

        if response.is_success:
            return response.json() if response.content else {}

        detail = _error_detail(response)
        if response.status_code == 401:
            self.session.clear()
            raise UnauthorizedError(
                detail if isinstance(detail, str) else 'Please log in again.',
                status_code=401,
                detail=detail,
            )
        if response.status_code >= 500:
            logger.error('%s %s failed with %s: %s', method, path, response.status_code, detail)
            raise ServerError(
                'An unexpected error occurred. Please try again later.',
                status_code=response.status_code,
                detail=detail,
            )
        raise ApiError(
            detail if isinstance(detail, str) else 'Request could not be completed.',
            status_code=response.status_code,
            detail=detail,
        )

    # auth

    def login(self, email: str, password: str) -> str:
        """Log in, load the current user and return the path to land on."""
        body = self._request('POST', '/auth/login', json={'email': email, 'password': password})
        return self._start_session(body)

    def register(self, name: str, email: str, password: str, telephone_number: str) -> str:
        body = self._request(
            'POST',
            '/auth/register',
            json={
                'name': name,
                'email': email,
                'password': password,
                'telephone_number': telephone_number,
            },
        )
        self._start_session(body)
        return '/dashboard'

    def _start_session(self, body: dict) -> str:
        token = body.get('token')
        if not token:
            raise ApiError('Invalid response from server')

        self.session.token = token
        try:
            self.session.user = self.me()
        except ApiError:
            self.session.clear()
            raise
        return landing_path(self.session.user)

    def me(self) -> dict:
        body = self._request('GET', '/auth/me')
        if not body.get('data'):
            raise ApiError('Failed to retrieve user data')
        return body['data']

    def logout(self) -> str:
        try:
            self._request('POST', '/auth/logout')
        except ApiError as exc:
            logger.warning('Logout call failed: %s', exc.message)
        finally:
            self.session.clear()
        return '/auth/login'

    # co-working spaces

    def list_spaces(self) -> list[dict]:
        return self._request('GET', '/coworking-spaces')['data']

    def get_space(self, space_id: int) -> dict:
        return self._request('GET', f'/coworking-spaces/{space_id}')['data']

    def create_space(self, **fields) -> dict:
        return self._request('POST', '/coworking-spaces', json=fields)['data']

    def update_space(self, space_id: int, **fields) -> dict:
        return self._request('PUT', f'/coworking-spaces/{space_id}', json=fields)['data']

    def delete_space(self, space_id: int) -> None:
        self._request('DELETE', f'/coworking-spaces/{space_id}')

    # reservations

    def booked_slots(self, space_id: int, reservation_date: date) -> list[str]:
        return self._request('GET', f'/reservations/booked/{space_id}/{reservation_date.isoformat()}')['data']

    def book(self, space_id: int, reservation_date: date, time_slot: str) -> dict:
        payload = {
            'coworking_space': space_id,
            'date': reservation_date.isoformat(),
            'time_slot': time_slot,
        }
        return self._request('POST', '/reservations', json=payload)['data']

    def my_reservations(self) -> list[dict]:
        return self._request('GET', '/reservations/my')['data']

    def cancel(self, reservation_id: int) -> dict:
        return self._request('PUT', f'/reservations/{reservation_id}/cancel')['data']

    def all_reservations(
        self,
        status: str | None = None,
        space_id: int | None = None,
        search: str | None = None,
    ) -> list[dict]:
        params = {'status': status, 'coworking_space': space_id, 'search': search}
        params = {key: value for key, value in params.items() if value is not None}
        return self._request('GET', '/reservations', params=params)['data']

    def get_reservation(self, reservation_id: int) -> dict:
        return self._request('GET', f'/reservations/{reservation_id}')['data']

    def update_reservation(self, reservation_id: int, **changes) -> dict:
        if isinstance(changes.get('date'), date):
            changes['date'] = changes['date'].isoformat()
        return self._request('PUT', f'/reservations/{reservation_id}', json=changes)['data']

    def delete_reservation(self, reservation_id: int) -> None:
        self._request('DELETE', f'/reservations/{reservation_id}')


def _error_detail(response: httpx.Response):
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict):
        return body.get('detail', body)
    return body
