"""
Sample catalog and listings loaded into an empty store.
"""

import logging

from realevr.schemas.catalog import AmenityCreate, PropertyTypeCreate
from realevr.schemas.property import PropertyCreate

logger = logging.getLogger(__name__)


SAMPLE_PROPERTY_TYPES = [
    {"name": "Apartments", "icon": "building"},
    {"name": "Houses", "icon": "home"},
    {"name": "Luxury", "icon": "hotel"},
    {"name": "Urban", "icon": "city"},
    {"name": "Beachfront", "icon": "water"},
    {"name": "Mountain", "icon": "mountain"},
    {"name": "Modern", "icon": "building"},
]

SAMPLE_AMENITIES = [
    {"name": "Pool Access", "icon": "swimming-pool", "description": "Properties with swimming pools"},
    {"name": "Fitness Center", "icon": "dumbbell", "description": "On-site gyms & fitness facilities"},
    {"name": "Pet Friendly", "icon": "paw", "description": "Accommodating for your pets"},
    {"name": "High-Speed Internet", "icon": "wifi", "description": "Fast & reliable connectivity"},
]

_UNSPLASH = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&w=600&h=400&q=80"

SAMPLE_PROPERTIES = [
    {
        "title": "La Rose Royal Apartments",
        "location": "Beverly Hills, Los Angeles",
        "price": 3200,
        "description": (
            "Experience luxury living at La Rose Royal Apartments. This elegant property offers "
            "spacious interiors, high-end finishes, and breathtaking views of Beverly Hills."
        ),
        "bedrooms": 3,
        "bathrooms": 2,
        "square_feet": 1850,
        "image_url": _UNSPLASH.format("1545324418-cc1a3fa10c00"),
        "rating": "4.97",
        "review_count": 243,
        "property_type": "Luxury",
        "category": "rental_units",
        "is_featured": True,
        "has_tour": True,
        "tour_url": "https://realevr.com/LA%20ROSE%20ROYAL%20APARTMENTS/",
        "amenities": ["Pool Access", "Fitness Center", "Underground parking"],
    },
    {
        "title": "Luxury Downtown Loft",
        "location": "San Francisco, CA",
        "price": 2850,
        "description": "Modern loft with open floor plan and city views.",
        "bedrooms": 2,
        "bathrooms": 2,
        "square_feet": 1200,
        "image_url": _UNSPLASH.format("1560448204-e02f11c3d0e2"),
        "rating": "4.9",
        "review_count": 156,
        "property_type": "Apartments",
        "category": "furnished_houses",
        "amenities": ["Fitness Center", "High-Speed Internet"],
    },
    {
        "title": "Skyline Penthouse",
        "location": "New York, NY",
        "price": 4500,
        "description": "Luxurious penthouse with panoramic views of the NYC skyline.",
        "bedrooms": 3,
        "bathrooms": 2.5,
        "square_feet": 1850,
        "image_url": _UNSPLASH.format("1493809842364-78817add7ffb"),
        "rating": "4.7",
        "review_count": 92,
        "property_type": "Luxury",
        "category": "for_sale",
        "amenities": ["Pool Access", "Fitness Center", "Concierge"],
    },
    {
        "title": "Harbor View Residence",
        "location": "Seattle, WA",
        "price": 3100,
        "description": "Modern residence with stunning harbor views and premium finishes.",
        "bedrooms": 2,
        "bathrooms": 2,
        "square_feet": 1350,
        "image_url": _UNSPLASH.format("1502005229762-cf1b2da7c5d6"),
        "rating": "4.8",
        "review_count": 115,
        "property_type": "Apartments",
        "category": "bank_sales",
        "amenities": ["High-Speed Internet", "Pet Friendly"],
    },
    {
        "title": "Modern Garden Flat",
        "location": "Austin, TX",
        "price": 1750,
        "description": "Cozy garden flat with modern amenities and outdoor space.",
        "bedrooms": 1,
        "bathrooms": 1,
        "square_feet": 850,
        "image_url": _UNSPLASH.format("1484154218962-a197022b5858"),
        "rating": "4.6",
        "review_count": 78,
        "property_type": "Urban",
        "category": "rental_units",
        "amenities": ["Pet Friendly", "High-Speed Internet"],
    },
    {
        "title": "Palm Springs Villa",
        "location": "Palm Springs, CA",
        "price": 5200,
        "description": "Spacious villa with private pool and desert mountain views.",
        "bedrooms": 4,
        "bathrooms": 3,
        "square_feet": 2500,
        "image_url": _UNSPLASH.format("1512917774080-9991f1c4c750"),
        "rating": "4.9",
        "review_count": 203,
        "property_type": "Houses",
        "category": "for_sale",
        "amenities": ["Pool Access", "Pet Friendly"],
    },
    {
        "title": "The Metropolitan",
        "location": "Chicago, IL",
        "price": 2950,
        "description": "Urban apartment in the heart of downtown with city views.",
        "bedrooms": 2,
        "bathrooms": 2,
        "square_feet": 1400,
        "image_url": _UNSPLASH.format("1554995207-c18c203602cb"),
        "rating": "4.7",
        "review_count": 132,
        "property_type": "Urban",
        "category": "bank_sales",
        "amenities": ["Fitness Center", "High-Speed Internet"],
    },
    {
        "title": "SoHo Artist Loft",
        "location": "New York, NY",
        "price": 3650,
        "description": "Authentic artist loft in historic SoHo with high ceilings.",
        "bedrooms": 1,
        "bathrooms": 1.5,
        "square_feet": 1100,
        "image_url": _UNSPLASH.format("1545324418-cc1a3fa10c00"),
        "rating": "4.8",
        "review_count": 95,
        "property_type": "Modern",
        "category": "rental_units",
        "amenities": ["High-Speed Internet"],
    },
    {
        "title": "Marina Bay Condo",
        "location": "Miami, FL",
        "price": 3400,
        "description": "Waterfront condo with marina access and ocean views.",
        "bedrooms": 2,
        "bathrooms": 2,
        "square_feet": 1300,
        "image_url": _UNSPLASH.format("1522708323590-d24dbb6b0267"),
        "rating": "4.5",
        "review_count": 87,
        "property_type": "Beachfront",
        "category": "furnished_houses",
        "amenities": ["Pool Access", "Fitness Center"],
    },
]


async def seed_storage(storage) -> None:
    """
    Load the sample catalog and listings into an empty store.

    Args:
        storage: Any BaseStorage implementation
    """
    for item in SAMPLE_PROPERTY_TYPES:
        await storage.create_property_type(PropertyTypeCreate(**item))

    for item in SAMPLE_AMENITIES:
        await storage.create_amenity(AmenityCreate(**item))

    for item in SAMPLE_PROPERTIES:
        await storage.create_property(PropertyCreate(currency="USD", **item))

    logger.info(
        f"Seeded {len(SAMPLE_PROPERTY_TYPES)} property types, {len(SAMPLE_AMENITIES)} amenities "
        f"and {len(SAMPLE_PROPERTIES)} properties"
    )
