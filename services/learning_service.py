"""
services/learning_service.py
----------------------------
Business logic for shared learning materials.

Uploading the file bytes to blob storage is the caller's job: validate
first with ``validate_upload()``, upload, then register the resulting URL
with ``LearningService.register_upload()``.
"""

from typing import Optional

import psycopg2

from config import ALLOWED_MATERIAL_MIME_TYPES, LEARNING_MODULES, MAX_MATERIAL_FILE_SIZE
from db import Database, DataLayerError
from repositories.learning_repo import LearningMaterialRepository
from services.auth_service import AuthService
from services.results import InvalidInput, reports_failures, success
from utils.logger import get_logger

logger = get_logger(__name__)

_EXTENSION_TYPES = {"pdf": "pdf", "doc": "doc", "docx": "docx"}


def validate_upload(
    title: Optional[str],
    module: Optional[str],
    file_name: Optional[str],
    mime_type: Optional[str],
    file_size: int,
) -> str:
    """
    Check an upload before it is sent to storage.

    Returns:
        The stored file type: 'pdf', 'doc' or 'docx'.

    Raises:
        InvalidInput: With the message to show the uploader.
    """
    if not file_name or not title or not module:
        raise InvalidInput("Missing required fields: file, title, and module are required")
    if module not in LEARNING_MODULES:
        raise InvalidInput("Invalid module. Must be 'ai' or 'cybersecurity'")
    if mime_type not in ALLOWED_MATERIAL_MIME_TYPES:
        raise InvalidInput("Invalid file type. Only PDF, DOC, and DOCX files are allowed")
    if file_size > MAX_MATERIAL_FILE_SIZE:
        raise InvalidInput(f"File size exceeds maximum of {MAX_MATERIAL_FILE_SIZE // (1024 * 1024)}MB")

    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    if extension not in _EXTENSION_TYPES:
        raise InvalidInput("Invalid file extension. Only .pdf, .doc, and .docx files are allowed")
    return _EXTENSION_TYPES[extension]


class LearningService:
    """Lists materials for everyone; uploads and deletes are super admin only."""

    def __init__(self, db: Database, auth: Optional[AuthService] = None):
        self.auth = auth or AuthService(db)
        self.repo = LearningMaterialRepository(db)

    @reports_failures
    async def register_upload(
        self,
        token: str,
        title: str,
        description: Optional[str],
        module: str,
        file_name: str,
        mime_type: str,
        file_size: int,
        file_url: str,
    ) -> dict:
        await self.auth.require_super(token)
        file_type = validate_upload(title, module, file_name, mime_type, file_size)
        material = await self.repo.create(
            title=title,
            description=description or None,
            module=module,
            file_url=file_url,
            file_name=file_name,
            file_type=file_type,
            file_size=file_size,
            uploaded_by="super_admin",
        )
        return success(material=material.to_dict())

    @reports_failures
    async def list_materials(self, token: Optional[str], module: Optional[str] = None) -> dict:
        """
        Materials for one module (or all), plus whether the caller holds an
        admin session. A failed session lookup just counts as anonymous.
        """
        authenticated = False
        if token:
            try:
                authenticated = await self.auth.get_session(token) is not None
            except (DataLayerError, psycopg2.Error) as e:
                logger.error(f"Error checking session: {e}")
        materials = await self.repo.list_materials(module if module in LEARNING_MODULES else None)
        return success(materials=[m.to_dict() for m in materials], authenticated=authenticated)

    @reports_failures
    async def delete_material(self, token: str, material_id: str) -> dict:
        await self.auth.require_super(token)
        if not material_id:
            raise InvalidInput("Material ID is required")
        await self.repo.delete(material_id)
        return success()
