"""
repositories/learning_repo.py
-----------------------------
Data access layer for learning materials.
All SQL queries related to the `learning_materials` table live here.
"""

from typing import Optional

from db import Database
from models.learning_material import LearningMaterial
from utils.helpers import new_id, now_iso
from utils.logger import get_logger

logger = get_logger(__name__)


class LearningMaterialRepository:
    """Repository for CRUD operations on the learning_materials table."""

    def __init__(self, db: Database):
        self.db = db

    async def create(
        self,
        title: str,
        description: Optional[str],
        module: str,
        file_url: str,
        file_name: str,
        file_type: str,
        file_size: Optional[int],
        uploaded_by: Optional[str],
    ) -> LearningMaterial:
        """Store metadata for a document already uploaded to storage."""
        now = now_iso()
        material = LearningMaterial(
            id=new_id(),
            title=title,
            description=description,
            module=module,
            file_url=file_url,
            file_name=file_name,
            file_type=file_type,
            file_size=file_size,
            uploaded_by=uploaded_by,
            created_at=now,
            updated_at=now,
        )
        sql = """
            INSERT INTO learning_materials
                (id, title, description, module, "fileUrl", "fileName", "fileType",
                 "fileSize", "uploadedBy", "createdAt", "updatedAt")
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s);
        """
        try:
            await self.db.execute(sql, (
                material.id, material.title, material.description, material.module,
                material.file_url, material.file_name, material.file_type, material.file_size,
                material.uploaded_by, material.created_at, material.updated_at,
            ))
        except Exception as e:
            logger.error(f"Failed to save learning material '{title}': {e}")
            raise
        logger.info(f"Added learning material {material.id} to module '{module}'")
        return material

    async def get_by_id(self, material_id: str) -> Optional[LearningMaterial]:
        result = await self.db.execute("SELECT * FROM learning_materials WHERE id = %s;", (material_id,))
        return self._row_to_material(result.rows[0]) if result.rows else None

    async def list_materials(self, module: Optional[str] = None) -> list[LearningMaterial]:
        """All materials, or one module's, newest first."""
        sql = "SELECT * FROM learning_materials"
        params: list = []
        if module:
            sql += " WHERE module = %s"
            params.append(module)
        sql += ' ORDER BY "createdAt" DESC;'
        result = await self.db.execute(sql, params)
        return [self._row_to_material(r) for r in result.rows]

    async def delete(self, material_id: str) -> bool:
        result = await self.db.execute("DELETE FROM learning_materials WHERE id = %s;", (material_id,))
        deleted = result.row_count > 0
        if deleted:
            logger.info(f"Deleted learning material {material_id}")
        return deleted

    @staticmethod
    def _row_to_material(row: dict) -> LearningMaterial:
        return LearningMaterial(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            module=row["module"],
            file_url=row["fileUrl"],
            file_name=row["fileName"],
            file_type=row["fileType"],
            file_size=row["fileSize"],
            uploaded_by=row["uploadedBy"],
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )
