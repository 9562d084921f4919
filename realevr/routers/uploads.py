"""
Upload endpoints for property images and virtual tour archives.
Both require the admin or property manager role.
"""

from fastapi import APIRouter, Depends, File, Path, UploadFile, status
from starlette.concurrency import run_in_threadpool
import logging
import os

from realevr.config import settings
from realevr.schemas.upload import ImageUploadResponse, TourUploadResponse
from realevr.schemas.user import UserInDB
from realevr.services.tour import TourService
from realevr.utils.dependencies import get_current_manager_user, get_tour_service
from realevr.utils.file_utils import FileStorage, FileValidator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Uploads"])


@router.post(
    "/property-image",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a property image",
    description="Multipart field `image`. Images up to 5MB; the file must decode as an image."
)
async def upload_property_image(
    image: UploadFile = File(..., description="Image file"),
    current_user: UserInDB = Depends(get_current_manager_user)
) -> ImageUploadResponse:
    """
    Store an image under /uploads/images with a random name.

    Raises:
        UnsupportedFileTypeError: If the file is not an image
        FileSizeExceededError: If the file exceeds the size limit
    """
    FileValidator.validate_image_upload(image)

    # Staged outside the served directory until Pillow has accepted it
    storage = FileStorage(settings.incoming_upload_path, chunk_size=settings.upload_chunk_size)
    temp_path = settings.incoming_upload_path / storage.generate_unique_name(".part")

    await storage.save_upload(image, temp_path, settings.max_image_size)
    try:
        extension = await run_in_threadpool(FileValidator.validate_image_content, temp_path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    final_path = settings.image_upload_path / f"{temp_path.stem}{extension}"
    settings.image_upload_path.mkdir(parents=True, exist_ok=True)
    os.replace(temp_path, final_path)

    logger.info(f"Image uploaded by {current_user.username}: {final_path.name}")
    return ImageUploadResponse(image_path=f"/uploads/images/{final_path.name}")


@router.post(
    "/virtual-tour/{property_id}",
    response_model=TourUploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a virtual tour",
    description=(
        "Multipart field `tourZip`. The archive must contain index.htm at its root "
        "or inside a single top-level folder."
    )
)
async def upload_virtual_tour(
    property_id: int = Path(..., description="Property ID"),
    tour_zip: UploadFile = File(..., alias="tourZip", description="Tour ZIP archive"),
    current_user: UserInDB = Depends(get_current_manager_user),
    tour_service: TourService = Depends(get_tour_service)
) -> TourUploadResponse:
    """
    Extract the archive and point the property at its entry page.

    Raises:
        PropertyNotFoundError: If the property doesn't exist
        UnsupportedFileTypeError: If the upload is not a zip
        TourExtractionError: If the archive is invalid or has no index.htm
    """
    tour_url, prop = await tour_service.upload_tour(property_id, tour_zip)
    logger.info(f"Tour uploaded by {current_user.username} for property {property_id}")
    return TourUploadResponse(tour_url=tour_url, property=prop)
