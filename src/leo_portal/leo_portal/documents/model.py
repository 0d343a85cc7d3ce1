from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Document:
    document_id: int
    name: str
    file_name: str
    storage_path: str
    content_type: Optional[str]
    size_bytes: int
    uploaded_by: Optional[int] = None
    uploaded_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "name": self.name,
            "file_name": self.file_name,
            "content_type": self.content_type,
            "size_bytes": self.size_bytes,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }
