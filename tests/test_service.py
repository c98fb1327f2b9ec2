import pytest

from book_inventory.models import BookPayload
from book_inventory.service import BookNotFound, BookService


@pytest.fixture()
def service(app):
    session = app.state.database.session()
    try:
        yield BookService(session)
    finally:
        session.close()


def test_create_and_get(service):
    created = service.create(BookPayload(title="Solaris", author="Stanislaw Lem", stock=2))
    assert created.id == 1
    assert created.created_at is not None
    assert service.get(created.id) == created


def test_missing_raises_not_found(service):
    with pytest.raises(BookNotFound):
        service.get(42)
    with pytest.raises(BookNotFound):
        service.update(42, BookPayload(title="x"))
    with pytest.raises(BookNotFound):
        service.delete(42)


def test_not_found_is_a_key_error(service):
    with pytest.raises(KeyError):
        service.get(42)


def test_update_is_full_replace(service):
    created = service.create(BookPayload(title="Ubik", author="Philip K. Dick", stock=4))
    updated = service.update(created.id, BookPayload(title="Ubik"))
    assert updated.author is None
    assert updated.stock == 0
    assert updated.created_at == created.created_at
    assert updated.updated_at >= created.updated_at


def test_delete_removes_row(service):
    created = service.create(BookPayload(title="Gone"))
    service.delete(created.id)
    assert service.list() == []
