"""
Pydantic schemas for property requests and responses.
Handles property CRUD operations, filters, and form-level validation.
"""

from pydantic import Field, field_validator, model_validator
from typing import ClassVar, Optional, List, Tuple
from datetime import datetime
from realevr.models.property import PropertyCategory
from realevr.schemas.base import CamelModel


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _clean_amenities(v):
    if v is None:
        return v
    cleaned = []
    for name in v:
        name = name.strip() if isinstance(name, str) else name
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


def _normalize_currency(v):
    if v is None:
        return v
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Currency must be a 3-letter ISO code")
    return v.upper()


class PropertyBase(CamelModel):
    """Base property schema with the fields an admin form submits."""

    title: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Property listing title",
        examples=["La Rose Royal Apartments"]
    )

    location: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Property location/address",
        examples=["Kololo, Kampala"]
    )

    price: int = Field(
        ...,
        gt=0,
        description="Price in whole currency units"
    )

    currency: str = Field(
        "UGX",
        description="ISO 4217 currency code"
    )

    description: str = Field(
        ...,
        min_length=20,
        max_length=10000,
        description="Detailed property description"
    )

    bedrooms: int = Field(..., ge=0, le=50, description="Number of bedrooms")
    bathrooms: float = Field(..., ge=0, le=50, description="Number of bathrooms, halves allowed")
    square_feet: int = Field(..., ge=1, le=1000000, description="Floor area in square feet")

    image_url: str = Field("", description="Cover image URL")
    rating: str = Field("0", max_length=10, description="Average rating, e.g. '4.97'")
    review_count: int = Field(0, ge=0)

    property_type: str = Field(..., min_length=1, max_length=100, description="Property type name")
    category: PropertyCategory = Field(..., description="Listing category")

    is_featured: bool = False
    has_tour: bool = False
    tour_url: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    owner_contact_info: Optional[str] = None

    @field_validator("title", "location", "description", "property_type", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Trim surrounding whitespace before length checks."""
        return _strip(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return _normalize_currency(v)

    @field_validator("amenities", mode="before")
    @classmethod
    def validate_amenities(cls, v):
        """Drop blank and duplicate amenity names, keeping order."""
        return _clean_amenities(v)


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "La Rose Royal Apartments",
                "location": "Kololo, Kampala",
                "price": 3200,
                "currency": "UGX",
                "description": "Elegant apartments with spacious interiors and city views.",
                "bedrooms": 3,
                "bathrooms": 2,
                "squareFeet": 1850,
                "propertyType": "Luxury",
                "category": "rental_units",
                "amenities": ["Pool Access", "Fitness Center"]
            }
        }
    }


class PropertyUpdate(CamelModel):
    """Schema for a partial property update. Only fields present in the body are applied."""

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    location: Optional[str] = Field(None, min_length=3, max_length=255)
    price: Optional[int] = Field(None, gt=0)
    currency: Optional[str] = None
    description: Optional[str] = Field(None, min_length=20, max_length=10000)
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[float] = Field(None, ge=0, le=50)
    square_feet: Optional[int] = Field(None, ge=1, le=1000000)
    image_url: Optional[str] = None
    rating: Optional[str] = Field(None, max_length=10)
    review_count: Optional[int] = Field(None, ge=0)
    property_type: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[PropertyCategory] = None
    is_featured: Optional[bool] = None
    has_tour: Optional[bool] = None
    tour_url: Optional[str] = None
    amenities: Optional[List[str]] = None
    owner_contact_info: Optional[str] = None

    # Fields that may be cleared by sending null
    NULLABLE_FIELDS: ClassVar[Tuple[str, ...]] = ("tour_url", "owner_contact_info")

    @field_validator("title", "location", "description", "property_type", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return _normalize_currency(v)

    @field_validator("amenities", mode="before")
    @classmethod
    def validate_amenities(cls, v):
        return _clean_amenities(v)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        """Explicit nulls are only allowed for optional columns."""
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.NULLABLE_FIELDS:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields explicitly provided in the request."""
        return self.model_dump(exclude_unset=True)


class PropertyResponse(CamelModel):
    """Stored property record as returned by the API."""

    id: int
    title: str
    location: str
    price: int
    currency: str = "UGX"
    description: str
    bedrooms: int
    bathrooms: float
    square_feet: int
    image_url: str = ""
    rating: str = "0"
    review_count: int = 0
    property_type: str
    category: PropertyCategory
    is_featured: bool = False
    has_tour: bool = False
    tour_url: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    owner_contact_info: Optional[str] = None
    view_count: int = 0
    created_at: Optional[datetime] = None


class PropertyFilter(CamelModel):
    """Body of POST /properties/filter. Every criterion is optional."""

    property_type: Optional[str] = None
    category: Optional[PropertyCategory] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0, description="Minimum number of bedrooms")
    bathrooms: Optional[float] = Field(None, ge=0, description="Minimum number of bathrooms")
    amenities: Optional[List[str]] = None
    has_tour: Optional[bool] = None

    @model_validator(mode="after")
    def validate_price_range(self):
        """Validate that min_price is not greater than max_price."""
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("minPrice cannot be greater than maxPrice")
        return self

    def matches(self, prop: PropertyResponse) -> bool:
        """Check whether a property satisfies every provided criterion."""
        if self.property_type is not None and prop.property_type != self.property_type:
            return False
        if self.category is not None and prop.category != self.category:
            return False
        if self.min_price is not None and prop.price < self.min_price:
            return False
        if self.max_price is not None and prop.price > self.max_price:
            return False
        if self.bedrooms is not None and prop.bedrooms < self.bedrooms:
            return False
        if self.bathrooms is not None and prop.bathrooms < self.bathrooms:
            return False
        if self.has_tour is not None and prop.has_tour != self.has_tour:
            return False
        if self.amenities and not all(a in prop.amenities for a in self.amenities):
            return False
        return True


class ViewCountResponse(CamelModel):
    """Result of recording a property view."""

    id: int
    view_count: int
