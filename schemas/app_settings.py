from typing import Optional

from pydantic import BaseModel, Field


class AppSettingsRead(BaseModel):
    app_name: Optional[str] = None
    app_description: Optional[str] = None
    keywords: Optional[str] = None
    theme_color: Optional[str] = None
    logo_url: Optional[str] = None
    icon_url: Optional[str] = None
    apple_icon_url: Optional[str] = None
    og_image_url: Optional[str] = None


class AppSettingsUpdate(BaseModel):
    app_name: Optional[str] = Field(None, max_length=100)
    app_description: Optional[str] = Field(None, max_length=2000)
    keywords: Optional[str] = Field(None, max_length=500)
    theme_color: Optional[str] = Field(None, max_length=20)
    logo_url: Optional[str] = Field(None, max_length=500)
    icon_url: Optional[str] = Field(None, max_length=500)
    apple_icon_url: Optional[str] = Field(None, max_length=500)
    og_image_url: Optional[str] = Field(None, max_length=500)
