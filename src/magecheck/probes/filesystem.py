from __future__ import annotations

import os
from pathlib import Path


class LocalFilesystem:
    def exists(self, path: Path) -> bool:
        return os.path.exists(path)

    def is_writable(self, path: Path) -> bool:
        return os.access(path, os.W_OK)
