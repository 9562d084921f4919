"""
Property API endpoints: public browsing, search and filtering, view counting,
and admin/property-manager CRUD.
"""

from fastapi import APIRouter, Depends, status, Query, Path, Response
from typing import List

from realevr.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyFilter,
    ViewCountResponse
)
from realevr.schemas.user import UserInDB
from realevr.services.property import PropertyService
from realevr.utils.dependencies import get_current_manager_user, get_property_service


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get("", response_model=List[PropertyResponse], summary="List all properties")
async def list_properties(
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    return await property_service.list_properties()


@router.get("/featured", response_model=List[PropertyResponse], summary="Featured properties")
async def featured_properties(
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    return await property_service.get_featured()


@router.get(
    "/popular",
    response_model=List[PropertyResponse],
    summary="Most viewed properties",
    description="Properties ordered by view count, highest first"
)
async def popular_properties(
    limit: int = Query(10, ge=1, le=100, description="Maximum number of properties"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    return await property_service.get_popular(limit)


@router.get("/recent", response_model=List[PropertyResponse], summary="Newest properties")
async def recent_properties(
    limit: int = Query(10, ge=1, le=100, description="Maximum number of properties"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    return await property_service.get_recent(limit)


@router.get("/category/{category}", response_model=List[PropertyResponse], summary="Properties by category")
async def properties_by_category(
    category: str = Path(..., description="rental_units, furnished_houses, for_sale or bank_sales"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    return await property_service.get_by_category(category)


@router.get(
    "/search",
    response_model=List[PropertyResponse],
    summary="Search properties",
    description="Case-insensitive match on title, location and property type. An empty query returns every property."
)
async def search_properties(
    q: str = Query("", description="Search text"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    return await property_service.search(q)


@router.post("/filter", response_model=List[PropertyResponse], summary="Filter properties")
async def filter_properties(
    filters: PropertyFilter,
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    """
    Every provided criterion must match. Bedrooms and bathrooms are minimums,
    prices are inclusive bounds and every listed amenity must be present.
    """
    return await property_service.filter(filters)


@router.get("/{property_id}", response_model=PropertyResponse, summary="Get property by ID")
async def get_property(
    property_id: int = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    return await property_service.get_property(property_id)


@router.post(
    "/{property_id}/view",
    response_model=ViewCountResponse,
    summary="Record a property view",
    description="Increments the view count and returns the new value"
)
async def record_view(
    property_id: int = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> ViewCountResponse:
    count = await property_service.record_view(property_id)
    return ViewCountResponse(id=property_id, view_count=count)


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Requires admin or property manager role."
)
@router.post(
    "/create",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False
)
async def create_property(
    property_data: PropertyCreate,
    current_user: UserInDB = Depends(get_current_manager_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    return await property_service.create_property(property_data)


@router.patch(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description="Partial update: only fields present in the body change. Requires admin or property manager role."
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: int = Path(..., description="Property ID"),
    current_user: UserInDB = Depends(get_current_manager_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    return await property_service.update_property(property_id, property_data)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Removes the property, its uploaded image and its extracted tour. Requires admin or property manager role."
)
async def delete_property(
    property_id: int = Path(..., description="Property ID"),
    current_user: UserInDB = Depends(get_current_manager_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Response:
    await property_service.delete_property(property_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
