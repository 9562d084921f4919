"""
Virtual tour service: receives a tour ZIP for a property, extracts it next to
the other tours and points the property at the extracted entry page.
"""

from pathlib import Path, PurePosixPath
from typing import Optional, Tuple
from urllib.parse import quote
import logging
import os
import shutil
import zipfile

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from realevr.schemas.property import PropertyResponse
from realevr.storage.base import BaseStorage
from realevr.utils.exceptions import PropertyNotFoundError, TourExtractionError
from realevr.utils.file_utils import FileStorage, FileValidator

logger = logging.getLogger(__name__)

TOURS_URL_PREFIX = "/uploads/tours"
INDEX_NAMES = ("index.htm", "index.html")
# Archive noise ignored when looking for a single top-level folder
_IGNORED_ENTRIES = {"__MACOSX", ".DS_Store"}


def tour_directory_name(property_id: int) -> str:
    return f"property_{property_id}_tour"


def _check_member_path(name: str, target: Path) -> None:
    """Reject archive members that would land outside the target directory."""
    posix = PurePosixPath(name.replace("\\", "/"))
    if posix.is_absolute() or ".." in posix.parts or (posix.parts and ":" in posix.parts[0]):
        raise TourExtractionError(f"Archive entry '{name}' escapes the tour directory")
    resolved = (target / Path(*posix.parts)).resolve() if posix.parts else target.resolve()
    if not resolved.is_relative_to(target.resolve()):
        raise TourExtractionError(f"Archive entry '{name}' escapes the tour directory")


def _find_index_in(directory: Path) -> Optional[Path]:
    files = {p.name.lower(): p for p in directory.iterdir() if p.is_file()}
    for index_name in INDEX_NAMES:
        if index_name in files:
            return files[index_name]
    return None


def find_tour_index(root: Path) -> Optional[str]:
    """
    Locate the tour entry page.

    index.htm is preferred over index.html, matched case-insensitively, either at
    the root or inside a single top-level folder.

    Returns:
        Path of the entry page relative to root in POSIX form, or None
    """
    found = _find_index_in(root)
    if found is None:
        entries = [p for p in root.iterdir() if p.name not in _IGNORED_ENTRIES]
        if len(entries) == 1 and entries[0].is_dir():
            found = _find_index_in(entries[0])
    if found is None:
        return None
    return found.relative_to(root).as_posix()


def extract_tour_archive(zip_path: Path, staging_dir: Path, max_size: Optional[int] = None) -> str:
    """
    Extract a tour archive into staging_dir and return the entry page path.

    max_size bounds the total uncompressed size of the members.

    Raises:
        TourExtractionError: If the archive is invalid, unsafe or has no entry page
    """
    try:
        with zipfile.ZipFile(zip_path) as archive:
            members = archive.infolist()
            if not members:
                raise TourExtractionError("Tour archive is empty")
            for member in members:
                _check_member_path(member.filename, staging_dir)
            if max_size is not None and sum(member.file_size for member in members) > max_size:
                raise TourExtractionError("Tour archive is too large once extracted")
            staging_dir.mkdir(parents=True, exist_ok=True)
            archive.extractall(staging_dir)
    except zipfile.BadZipFile:
        raise TourExtractionError("Uploaded file is not a valid zip archive")

    index_path = find_tour_index(staging_dir)
    if index_path is None:
        raise TourExtractionError("Tour archive does not contain an index.htm file")
    return index_path


class TourService:
    """
    Handles the upload, extraction and wiring of virtual tours.
    """

    def __init__(
        self,
        storage: BaseStorage,
        tours_dir: Path,
        incoming_dir: Path,
        max_size: int,
        chunk_size: int = 1024 * 1024
    ):
        self.storage = storage
        self.tours_dir = Path(tours_dir)
        # Archives are received and extracted here, outside the served tours directory
        self.incoming_dir = Path(incoming_dir)
        self.max_size = max_size
        self.files = FileStorage(self.incoming_dir, chunk_size=chunk_size)

    def tour_path(self, property_id: int) -> Path:
        return self.tours_dir / tour_directory_name(property_id)

    async def upload_tour(self, property_id: int, file: UploadFile) -> Tuple[str, PropertyResponse]:
        """
        Store, extract and attach a tour archive to a property.

        The existing tour, if any, is only replaced once the new archive has been
        extracted and its entry page found.

        Args:
            property_id: Property receiving the tour
            file: Uploaded ZIP archive

        Returns:
            Tuple of (tour URL, updated property)

        Raises:
            PropertyNotFoundError: If the property doesn't exist
            UnsupportedFileTypeError: If the upload is not a zip
            FileSizeExceededError: If the archive is too large
            TourExtractionError: If the archive is invalid or has no entry page
        """
        if await self.storage.get_property(property_id) is None:
            raise PropertyNotFoundError(property_id)

        FileValidator.validate_tour_upload(file)

        zip_path = self.incoming_dir / self.files.generate_unique_name(".zip")
        staging_dir = self.incoming_dir / f"staging_{zip_path.stem}"
        final_dir = self.tour_path(property_id)

        try:
            size = await self.files.save_upload(file, zip_path, self.max_size)
            logger.info(f"Received tour archive for property {property_id} ({size} bytes)")

            index_path = await run_in_threadpool(extract_tour_archive, zip_path, staging_dir, self.max_size)
            await run_in_threadpool(self._swap_in, staging_dir, final_dir)
        finally:
            zip_path.unlink(missing_ok=True)
            if staging_dir.exists():
                await run_in_threadpool(shutil.rmtree, staging_dir, True)

        tour_url = f"{TOURS_URL_PREFIX}/{final_dir.name}/{quote(index_path)}"
        updated = await self.storage.update_property(property_id, {"tour_url": tour_url, "has_tour": True})
        if updated is None:
            # Property deleted while the archive was being extracted
            await run_in_threadpool(shutil.rmtree, final_dir, True)
            raise PropertyNotFoundError(property_id)

        logger.info(f"Tour for property {property_id} available at {tour_url}")
        return tour_url, updated

    @staticmethod
    def _swap_in(staging_dir: Path, final_dir: Path) -> None:
        final_dir.parent.mkdir(parents=True, exist_ok=True)
        if final_dir.exists():
            shutil.rmtree(final_dir)
        os.replace(staging_dir, final_dir)

