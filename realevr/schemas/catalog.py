"""
Pydantic schemas for amenities and property types.
"""

from pydantic import Field, field_validator
from realevr.schemas.base import CamelModel


class AmenityCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1)

    @field_validator("name", "icon", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class AmenityResponse(CamelModel):
    id: int
    name: str
    icon: str
    description: str


class PropertyTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(..., min_length=1, max_length=50)

    @field_validator("name", "icon", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class PropertyTypeResponse(CamelModel):
    id: int
    name: str
    icon: str
