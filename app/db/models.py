import uuid

from sqlalchemy import (
    BigInteger,
    Column,
    Computed,
    DateTime,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, TSVECTOR, UUID

from app.db.database import Base


class EligibilityDocument(Base):
    __tablename__ = "eligibility_documents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Source
    file_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String(128), nullable=False)
    source_type = Column(Text, nullable=False, default="pdf", server_default="pdf")  # pdf | web
    source_url = Column(Text, nullable=True)  # Set only for web pages
    page_title = Column(Text, nullable=True)
    hash = Column(String(128), nullable=True)  # sha256 of uploaded PDF bytes

    # Content
    raw_text = Column(Text, nullable=False)  # Extracted body, capped at ingestion
    raw_eligibility_text = Column(Text, nullable=False)  # Verbatim eligibility excerpt
    eligibility_json = Column(JSONB, nullable=False)
    program_name = Column(String(255), nullable=True)

    # Derived location (best effort, from eligibility.locationConstraints)
    location_city = Column(Text, nullable=True)
    location_county = Column(Text, nullable=True)
    location_state = Column(Text, nullable=True)

    # Search surrogate; search_tsv is generated by Postgres from search_text
    search_text = Column(Text, nullable=False, default="", server_default="")
    search_tsv = Column(
        TSVECTOR,
        Computed("to_tsvector('english', search_text)", persisted=True),
    )

    __table_args__ = (
        Index("ix_eligibility_documents_created_at", "created_at"),
        Index("ix_eligibility_documents_search_tsv", "search_tsv", postgresql_using="gin"),
        Index(
            "ix_eligibility_documents_search_text_trgm",
            "search_text",
            postgresql_using="gin",
            postgresql_ops={"search_text": "gin_trgm_ops"},
        ),
    )
