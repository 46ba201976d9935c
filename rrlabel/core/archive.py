"""Project archives.

A project is a zip file (``.r49``) holding ``manifest.json`` and the bytes of
every photograph named in the manifest's image list.
"""

import zipfile
from pathlib import Path
from typing import Dict, Mapping, Tuple, Union

import cv2
import numpy as np
from loguru import logger

from .constants import FileNames
from .exceptions import ArchiveError
from .manifest_store import ManifestStore


def read_image_size(data: bytes) -> Tuple[int, int]:
    """Decode image bytes and return (width, height).

    Raises:
        ArchiveError: If the bytes are not a decodable image
    """
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED) if buffer.size else None
    if image is None:
        raise ArchiveError("Could not decode image data", {"bytes": len(data)})
    height, width = image.shape[:2]
    return int(width), int(height)


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes into a BGR array.

    Raises:
        ArchiveError: If the bytes are not a decodable image
    """
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
    if image is None:
        raise ArchiveError("Could not decode image data", {"bytes": len(data)})
    return image


def save_project(
    path: Union[str, Path],
    store: ManifestStore,
    images: Mapping[str, bytes]
) -> Path:
    """Write the store's document and its images to a project archive.

    Args:
        path: Archive path; ``.r49`` is appended when the path has no suffix
        store: Store whose current document is saved
        images: Image bytes keyed by the filenames used in the document

    Returns:
        Path of the written archive

    Raises:
        ArchiveError: If an image listed in the document has no bytes, or the
            archive cannot be written
    """
    path = Path(path)
    if not path.suffix:
        path = path.with_suffix(FileNames.ARCHIVE_SUFFIX)

    document = store.document
    missing = [image.filename for image in document.images if image.filename not in images]
    if missing:
        raise ArchiveError("Image data missing for archive", {"missing": missing})

    try:
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(FileNames.MANIFEST_JSON, store.to_json())
            for image in document.images:
                archive.writestr(image.filename, images[image.filename])
    except OSError as e:
        raise ArchiveError(f"Cannot write project archive: {path}", {"error": str(e)}) from e

    logger.info(f"Saved project {path} ({len(document.images)} image(s))")
    return path


def load_project(path: Union[str, Path], **store_kwargs) -> Tuple[ManifestStore, Dict[str, bytes]]:
    """Read a project archive.

    Args:
        path: Archive path
        **store_kwargs: Passed to the created :class:`ManifestStore`

    Returns:
        The store holding the loaded document, and image bytes by filename

    Raises:
        ArchiveError: If the archive is unreadable or lacks a manifest
        UnsupportedVersionError: If the manifest version is not supported
        DocumentFormatError: If the manifest does not match the schema
    """
    path = Path(path)
    try:
        with zipfile.ZipFile(path, "r") as archive:
            names = set(archive.namelist())
            if FileNames.MANIFEST_JSON not in names:
                raise ArchiveError(f"No {FileNames.MANIFEST_JSON} in project archive: {path}")
            text = archive.read(FileNames.MANIFEST_JSON).decode("utf-8")
            store = ManifestStore.from_json(text, source=str(path), **store_kwargs)

            images = {}
            for image in store.document.images:
                if image.filename in names:
                    images[image.filename] = archive.read(image.filename)
                else:
                    logger.warning(f"Image {image.filename} listed in manifest but not archived")
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Not a project archive: {path}", {"error": str(e)}) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ArchiveError(f"Cannot read project archive: {path}", {"error": str(e)}) from e

    logger.info(f"Loaded project {path} ({len(images)} image(s))")
    return store, images
