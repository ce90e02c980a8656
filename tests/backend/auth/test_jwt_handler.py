import jwt
import pytest

from backend.auth import jwt_handler
from backend.auth.passwords import hash_password, verify_password


def test_access_token_round_trip_carries_subject_and_role() -> None:
    token = jwt_handler.create_access_token(subject='42', role='admin')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == '42'
    assert payload['role'] == 'admin'
    assert payload['exp'] > payload['iat']


def test_decode_rejects_tampered_token() -> None:
    token = jwt.encode({'sub': '1'}, 'some-other-secret', algorithm='HS256')

    with pytest.raises(jwt.InvalidSignatureError):
        jwt_handler.decode_access_token(token)


def test_password_hash_verifies_only_original_password() -> None:
    hashed = hash_password('secret123')

    assert hashed != 'secret123'
    assert verify_password('secret123', hashed)
    assert not verify_password('secret124', hashed)
    assert not verify_password('secret123', '')
