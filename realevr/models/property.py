"""
Property model for rental and sale listings.
Handles listing data, pricing, virtual tour wiring and view tracking.
"""

from sqlalchemy import String, Text, Integer, Float, Boolean, DateTime, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from realevr.database import Base
from datetime import datetime, timezone
from typing import List, Optional
import enum


class PropertyCategory(str, enum.Enum):
    """Listing category shown as separate sections in the front end."""
    RENTAL_UNITS = "rental_units"
    FURNISHED_HOUSES = "furnished_houses"
    FOR_SALE = "for_sale"
    BANK_SALES = "bank_sales"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Property(Base):
    """
    Property model for managing listings.
    Amenities are stored as a JSON list of names with no link to the amenities table.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="UGX")
    description: Mapped[str] = mapped_column(Text, nullable=False)

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    bathrooms: Mapped[float] = mapped_column(Float, nullable=False)
    square_feet: Mapped[int] = mapped_column(Integer, nullable=False)

    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    rating: Mapped[str] = mapped_column(String(10), nullable=False, default="0")
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    property_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    category: Mapped[PropertyCategory] = mapped_column(
        SQLEnum(
            PropertyCategory,
            values_callable=lambda e: [member.value for member in e],
            native_enum=False,
            length=32,
        ),
        nullable=False,
        index=True,
    )

    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    has_tour: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tour_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    owner_contact_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}, price={self.price})>"
