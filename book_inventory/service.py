import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .entities import BookRecord
from .models import Book, BookPayload

logger = logging.getLogger(__name__)


class BookNotFound(KeyError):
    pass


class BookService:
    def __init__(self, session: Session):
        self.session = session

    def list(self) -> list[Book]:
        records = self.session.execute(select(BookRecord).order_by(BookRecord.id)).scalars().all()
        return [self._to_schema(record) for record in records]

    def create(self, payload: BookPayload) -> Book:
        record = BookRecord(**payload.model_dump())
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        logger.info("book.created", extra={"book_id": record.id})
        return self._to_schema(record)

    def get(self, book_id: int) -> Book:
        return self._to_schema(self._get_record(book_id))

    def update(self, book_id: int, payload: BookPayload) -> Book:
        record = self._get_record(book_id)
        for field, value in payload.model_dump().items():
            setattr(record, field, value)
        # A PUT that changes nothing must still bump updated_at.
        record.updated_at = func.now()
        self.session.commit()
        self.session.refresh(record)
        logger.info("book.updated", extra={"book_id": book_id})
        return self._to_schema(record)

    def delete(self, book_id: int) -> None:
        record = self._get_record(book_id)
        self.session.delete(record)
        self.session.commit()
        logger.info("book.deleted", extra={"book_id": book_id})

    def _get_record(self, book_id: int) -> BookRecord:
        record = self.session.get(BookRecord, book_id)
        if record is None:
            raise BookNotFound(book_id)
        return record

    @staticmethod
    def _to_schema(record: BookRecord) -> Book:
        return Book.model_validate(record)
