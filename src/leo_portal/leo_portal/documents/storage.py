from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import IO, Tuple

from werkzeug.utils import secure_filename

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class LocalDocumentStorage:
    """Stores uploads as ``<root>/<random key>/<secure filename>``."""

    def __init__(self, root: str | Path):
        self._root = Path(root)

    def save(self, file_name: str, stream: IO[bytes]) -> Tuple[str, str, int]:
        """Returns (relative storage path, safe file name, size in bytes)."""
        safe_name = secure_filename(file_name or "")
        if not safe_name:
            raise ValidationError("The file needs a valid name")

        rel_path = f"{uuid.uuid4().hex}/{safe_name}"
        target = self._root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as out:
            shutil.copyfileobj(stream, out)
        return rel_path, safe_name, target.stat().st_size

    def path_for(self, rel_path: str) -> Path:
        path = (self._root / rel_path).resolve()
        if self._root.resolve() not in path.parents:
            raise ValidationError("Invalid document path")
        return path

    def delete(self, rel_path: str) -> None:
        path = self.path_for(rel_path)
        if path.exists():
            path.unlink()
        try:
            path.parent.rmdir()
        except OSError:
            logger.debug("Upload folder %s not empty or already gone", path.parent)
