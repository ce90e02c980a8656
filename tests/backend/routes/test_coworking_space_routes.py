import pytest
from pydantic import ValidationError

from backend.models.reservation import Reservation
from backend.routes.coworking_space_routes import CoworkingSpaceRequest

API = '/api/v1/coworking-spaces'
NEW_SPACE = {
    'name': ' Desk Club ',
    'location': '99 River Rd, Chiang Mai',
    'available_seats': 25,
    'latitude': 18.7883,
    'longitude': 98.9853,
}


def test_space_request_normalizes_name() -> None:
    assert CoworkingSpaceRequest(**NEW_SPACE).name == 'Desk Club'


@pytest.mark.parametrize(
    'overrides',
    [
        {'available_seats': 0},
        {'name': ''},
        {'location': '  '},
        {'latitude': 91.0},
        {'longitude': -181.0},
    ],
)
def test_space_request_rejects_invalid_fields(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        CoworkingSpaceRequest(**{**NEW_SPACE, **overrides})


def test_list_and_get_spaces_are_public(client, space, make_space) -> None:
    make_space('Another Desk')

    listing = client.get(API)
    detail = client.get(f'{API}/{space.id}')

    assert listing.status_code == 200
    assert listing.json()['count'] == 2
    assert [item['name'] for item in listing.json()['data']] == ['Another Desk', 'Hive Sathorn']
    assert detail.json()['data']['available_seats'] == 10


def test_get_missing_space_returns_404(client) -> None:
    response = client.get(f'{API}/404')

    assert response.status_code == 404
    assert response.json() == {'detail': 'Co-working space not found.'}


def test_only_admin_can_create_space(client, member, admin, auth_headers) -> None:
    forbidden = client.post(API, json=NEW_SPACE, headers=auth_headers(member))
    created = client.post(API, json=NEW_SPACE, headers=auth_headers(admin))

    assert forbidden.status_code == 403
    assert created.status_code == 201
    assert created.json()['data']['name'] == 'Desk Club'


def test_create_space_with_duplicate_name_conflicts(client, admin, space, auth_headers) -> None:
    response = client.post(API, json={**NEW_SPACE, 'name': 'Hive Sathorn'}, headers=auth_headers(admin))

    assert response.status_code == 409


def test_admin_updates_space(client, admin, space, auth_headers) -> None:
    response = client.put(f'{API}/{space.id}', json={'available_seats': 40}, headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()['data']['available_seats'] == 40
    assert response.json()['data']['name'] == 'Hive Sathorn'


def test_deleting_space_removes_its_reservations(client, db, member, admin, space, auth_headers) -> None:
    client.post(
        '/api/v1/reservations',
        json={'coworking_space': space.id, 'date': '2024-01-10', 'time_slot': '09:00 - 11:00'},
        headers=auth_headers(member),
    )

    response = client.delete(f'{API}/{space.id}', headers=auth_headers(admin))

    assert response.status_code == 200
    assert db.query(Reservation).count() == 0
    assert client.get(f'{API}/{space.id}').status_code == 404


@pytest.mark.parametrize('space_id', [0, 2**63, 2**70])
def test_out_of_range_space_id_is_rejected(client, admin, auth_headers, space_id: int) -> None:
    headers = auth_headers(admin)

    assert client.get(f'{API}/{space_id}').status_code == 422
    assert client.put(f'{API}/{space_id}', json={'available_seats': 5}, headers=headers).status_code == 422
    assert client.delete(f'{API}/{space_id}', headers=headers).status_code == 422
