"""MediaAsset SQLAlchemy model"""

from sqlalchemy import Column, Text, Integer, ForeignKey, Uuid

from .base import Base, uuid_pk, created_at_column


class MediaAsset(Base):
    """Metadata for an object uploaded directly to storage via a presigned URL."""
    __tablename__ = "media_asset"

    id = uuid_pk()
    key = Column(Text, nullable=False, unique=True)
    url = Column(Text, nullable=False)
    bucket = Column(Text, nullable=False)
    mime_type = Column(Text, nullable=False)
    size = Column(Integer, nullable=False)
    kind = Column(Text, nullable=False, default="general")
    uploaded_by_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenant.id", ondelete="SET NULL"), nullable=True)
    created_at = created_at_column()
