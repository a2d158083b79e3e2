from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from core.database import Base


class AppSettings(Base):
    """Site branding; a single row, created on first update."""

    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True)
    app_name = Column(String(100), nullable=True)
    app_description = Column(Text, nullable=True)
    keywords = Column(String(500), nullable=True)
    theme_color = Column(String(20), nullable=True)
    logo_url = Column(String(500), nullable=True)
    icon_url = Column(String(500), nullable=True)
    apple_icon_url = Column(String(500), nullable=True)
    og_image_url = Column(String(500), nullable=True)
    updated_at = Column(DateTime, server_default=func.now())
    updated_by_id = Column(Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
