"""
Pydantic schemas for Galeri Backend.

Contains all API request/response schemas organized by module.
"""

from .account import *
from .app_settings import *
from .authentication import *
from .photo import *
from .responses import *
