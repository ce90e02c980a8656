import pytest

from backend.auth.passwords import verify_password
from backend.create_admin import promote_or_create_admin


def test_promotes_existing_user(db, member) -> None:
    user = promote_or_create_admin(db, ' MINA@example.com ', None, None, None)

    assert user.id == member.id
    assert user.role == 'admin'


def test_creates_new_admin_with_password(db) -> None:
    user = promote_or_create_admin(db, 'root@example.com', None, 'hunter22', '020000000')

    assert user.name == 'root'
    assert user.role == 'admin'
    assert verify_password('hunter22', user.hashed_password)


def test_new_admin_requires_password(db) -> None:
    with pytest.raises(ValueError):
        promote_or_create_admin(db, 'root@example.com', 'Root', None, None)
