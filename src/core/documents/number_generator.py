import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Insert

from src.core.documents.models import DocumentSequence
from src.core.documents.types import DocumentType, document_prefix
from src.core.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass(frozen=True)
class AllocatedNumber:
    """A sequence number together with its printed form."""

    sequence_number: int
    formatted: str


def format_document_number(prefix: str, year: int, number: int) -> str:
    """PREFIX-YYYY-NNNN; numbers past 9999 keep all their digits."""
    return f"{prefix}-{year}-{number:04d}"


def build_upsert_statement(dialect_name: str, prefix: str, year: int) -> Insert:
    """
    Single-statement insert-or-increment for a (prefix, year) counter.

    A missing row is created holding 1; an existing row is bumped by exactly one
    under the database's own row lock. The new value comes back via RETURNING.
    """
    insert = UPSERT_DIALECTS[dialect_name]
    stmt = insert(DocumentSequence).values(prefix=prefix, year=year, last_number=1)
    return stmt.on_conflict_do_update(
        index_elements=[DocumentSequence.prefix, DocumentSequence.year],
        set_={"last_number": DocumentSequence.last_number + 1},
    ).returning(DocumentSequence.last_number)


class DocumentNumberGenerator:
    """
    Generates sequential document numbers in format: PREFIX-YYYY-NNNN

    Examples:
        QT-2025-0001
        INV-2025-0007
        VP-2026-10000

    The increment runs inside the caller's transaction and is never committed
    here: if the caller rolls back, the counter rolls back with it.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def allocate(
        self, doc_type: DocumentType | str, year: int | None = None
    ) -> AllocatedNumber:
        """Issue the next number for the document type's prefix and year."""
        if year is None:
            year = datetime.now().year
        prefix = document_prefix(doc_type)

        try:
            dialect_name = self.session.get_bind().dialect.name
            if dialect_name in UPSERT_DIALECTS:
                result = await self.session.execute(
                    build_upsert_statement(dialect_name, prefix, year)
                )
                number = result.scalar_one()
            else:
                number = await self._allocate_locked(prefix, year)
        except SQLAlchemyError as exc:
            logger.error("Sequence allocation failed for %s/%s: %s", prefix, year, exc)
            raise StorageUnavailableError(
                f"Could not allocate a document number for {prefix}-{year}"
            ) from exc

        formatted = format_document_number(prefix, year, number)
        logger.debug("Allocated document number %s", formatted)
        return AllocatedNumber(sequence_number=number, formatted=formatted)

    async def generate(self, doc_type: DocumentType | str, year: int | None = None) -> str:
        """Generate next document number string for given type and year."""
        allocated = await self.allocate(doc_type, year)
        return allocated.formatted

    async def _allocate_locked(self, prefix: str, year: int) -> int:
        """SELECT FOR UPDATE read-modify-write for dialects without upsert."""
        stmt = (
            select(DocumentSequence)
            .where(DocumentSequence.prefix == prefix, DocumentSequence.year == year)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        sequence = result.scalar_one_or_none()

        if sequence is None:
            # A concurrent first insert loses on the unique constraint and fails
            # instead of sharing a number.
            sequence = DocumentSequence(prefix=prefix, year=year, last_number=0)
            self.session.add(sequence)
            await self.session.flush()

            result = await self.session.execute(stmt)
            sequence = result.scalar_one()

        sequence.last_number += 1
        await self.session.flush()
        return sequence.last_number


async def allocate_document_number(
    session: AsyncSession, doc_type: DocumentType | str, year: int | None = None
) -> AllocatedNumber:
    """Allocate the next number for a document type within the session's transaction."""
    return await DocumentNumberGenerator(session).allocate(doc_type, year)


async def get_document_number(
    session: AsyncSession, doc_type: DocumentType | str, year: int | None = None
) -> str:
    """Convenience function to generate a formatted document number."""
    return await DocumentNumberGenerator(session).generate(doc_type, year)
