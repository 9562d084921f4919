"""
Pydantic schemas for upload responses.
"""

from realevr.schemas.base import CamelModel
from realevr.schemas.property import PropertyResponse


class ImageUploadResponse(CamelModel):
    status: str = "success"
    image_path: str
    message: str = "Image uploaded successfully"


class TourUploadResponse(CamelModel):
    status: str = "success"
    tour_url: str
    property: PropertyResponse
    message: str = "Virtual tour uploaded and extracted successfully"
