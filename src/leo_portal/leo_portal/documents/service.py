from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Optional

from ..common.validators import require_min_length
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import Document
from .repository import DocumentRepository
from .storage import LocalDocumentStorage

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(self, documents: DocumentRepository, storage: LocalDocumentStorage):
        self._documents = documents
        self._storage = storage

    def list_documents(self):
        return self._documents.list_all()

    def get(self, document_id: int) -> Document:
        doc = self._documents.get_by_id(document_id)
        if not doc:
            raise NotFoundError("Document not found")
        return doc

    def upload(
        self,
        *,
        current_role: Role,
        uploaded_by: int,
        name: str,
        file_name: str,
        stream: IO[bytes],
        content_type: Optional[str] = None,
    ) -> Document:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can upload documents")
        name = require_min_length(name, "Document name", 2)

        rel_path, safe_name, size = self._storage.save(file_name, stream)
        try:
            doc_id = self._documents.create(
                name=name,
                file_name=safe_name,
                storage_path=rel_path,
                content_type=content_type,
                size_bytes=size,
                uploaded_by=uploaded_by,
            )
        except Exception:
            self._storage.delete(rel_path)
            raise
        logger.info("Document %s uploaded (%d bytes)", doc_id, size)
        return self.get(doc_id)

    def file_path(self, document_id: int) -> tuple[Document, Path]:
        doc = self.get(document_id)
        path = self._storage.path_for(doc.storage_path)
        if not path.exists():
            raise NotFoundError("The file for this document is missing")
        return doc, path

    def delete(self, *, current_role: Role, document_id: int) -> None:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can delete documents")
        doc = self.get(document_id)
        self._storage.delete(doc.storage_path)
        self._documents.delete_by_id(document_id)
        logger.info("Document %s deleted", document_id)
