"""
Catalog models: amenities and property types offered as browse filters.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column
from realevr.database import Base


class Amenity(Base):
    __tablename__ = "amenities"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)


class PropertyType(Base):
    __tablename__ = "property_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False)
