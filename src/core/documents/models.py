from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import Base


class DocumentSequence(Base):
    """
    Counter behind document numbers: last issued value per (prefix, year).

    A row appears with the first allocation for its key and is only ever
    incremented afterwards.
    """

    __tablename__ = "document_sequences"
    __table_args__ = (UniqueConstraint("prefix", "year", name="uq_document_sequence_prefix_year"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prefix: Mapped[str] = mapped_column(String(20), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    last_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
