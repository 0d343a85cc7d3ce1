from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Document


class DocumentRepository(Protocol):
    def get_by_id(self, document_id: int) -> Optional[Document]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Document]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        file_name: str,
        storage_path: str,
        content_type: Optional[str],
        size_bytes: int,
        uploaded_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def delete_by_id(self, document_id: int) -> bool:
        raise NotImplementedError
