"""
Catalog API endpoints for amenities and property types.
Listing is public; creating entries requires the admin role.
"""

from fastapi import APIRouter, Depends, status
from typing import List

from realevr.schemas.catalog import (
    AmenityCreate,
    AmenityResponse,
    PropertyTypeCreate,
    PropertyTypeResponse
)
from realevr.schemas.user import UserInDB
from realevr.storage.base import BaseStorage
from realevr.utils.dependencies import get_current_admin_user, get_storage


router = APIRouter(tags=["Catalog"])


@router.get("/property-types", response_model=List[PropertyTypeResponse], summary="List property types")
async def list_property_types(storage: BaseStorage = Depends(get_storage)) -> List[PropertyTypeResponse]:
    return await storage.get_all_property_types()


@router.post(
    "/property-types",
    response_model=PropertyTypeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create property type"
)
async def create_property_type(
    data: PropertyTypeCreate,
    current_user: UserInDB = Depends(get_current_admin_user),
    storage: BaseStorage = Depends(get_storage)
) -> PropertyTypeResponse:
    return await storage.create_property_type(data)


@router.get("/amenities", response_model=List[AmenityResponse], summary="List amenities")
async def list_amenities(storage: BaseStorage = Depends(get_storage)) -> List[AmenityResponse]:
    return await storage.get_all_amenities()


@router.post(
    "/amenities",
    response_model=AmenityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create amenity"
)
async def create_amenity(
    data: AmenityCreate,
    current_user: UserInDB = Depends(get_current_admin_user),
    storage: BaseStorage = Depends(get_storage)
) -> AmenityResponse:
    return await storage.create_amenity(data)
