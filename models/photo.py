"""
Photo metadata.

The image bytes live in the data store's object storage; this table only
records where they are, who owns them and whether they sit in the trash.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from core.database import Base


class Photo(Base):
    __tablename__ = "photos"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    storage_path = Column(String(500), nullable=False)
    display_url = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(100), nullable=True)
    exif_data = Column(JSON, nullable=False, default=dict)
    # uploader ip, user agent and device type captured at registration time
    audit_metadata = Column(JSON, nullable=False, default=dict)

    # Trash
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)

    def __repr__(self) -> str:
        return f"<Photo id={self.id} owner_id={self.owner_id} deleted={self.is_deleted}>"
