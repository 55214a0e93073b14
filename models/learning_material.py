"""
models/learning_material.py
---------------------------
Domain model for shared learning materials (uploaded documents).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class LearningMaterial:
    """
    Metadata for one uploaded document; the bytes live in blob storage.

    Attributes:
        id: Primary key.
        title: Display title.
        description: Optional summary.
        module: 'ai' or 'cybersecurity'.
        file_url: Public URL returned by the storage upload.
        file_name: Original file name.
        file_type: 'pdf' | 'doc' | 'docx'.
        file_size: Size in bytes, if known.
        uploaded_by: Uploader label (e.g., 'super_admin').
    """
    id: str
    title: str
    module: str
    file_url: str
    file_name: str
    file_type: str
    description: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "module": self.module,
            "fileUrl": self.file_url,
            "fileName": self.file_name,
            "fileType": self.file_type,
            "fileSize": self.file_size,
            "uploadedBy": self.uploaded_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
