from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class CatalogConfig:
    data_dir: Path = Path(os.getenv("SILKROAD_DATA_DIR", str(_DEFAULT_DATA_DIR)))
    sites_filename: str = "sites.csv"
    tags_filename: str = "tags.csv"

    @property
    def sites_path(self) -> Path:
        return self.data_dir / self.sites_filename

    @property
    def tags_path(self) -> Path:
        return self.data_dir / self.tags_filename


DEFAULT_CATALOG_CONFIG = CatalogConfig()
