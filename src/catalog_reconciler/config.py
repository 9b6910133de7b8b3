"""Configuration for the catalog reconciliation pipeline.

Everything that used to be a module-level constant (district, source URL,
file locations) lives on ``PipelineConfig`` and is passed explicitly into the
pipeline entry points.
"""

from dataclasses import dataclass
import os
from pathlib import Path

from .exceptions import ConfigError

DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_CATALOG_PATH = DEFAULT_OUTPUT_DIR / "catalog.json"
DEFAULT_SOURCES_DIR = DEFAULT_OUTPUT_DIR / "schools"

# Per-source files are named courses.<district-slug>.<SchoolSlug>.json
SOURCE_FILE_GLOB = "courses.*.json"

UNMATCHED_REPORT_LIMIT = 20


@dataclass
class PipelineConfig:
    """Configuration for one pipeline run.

    Attributes:
        district: District identifier written to the catalog ``source`` block.
        source_url: URL of the catalog the sources were extracted from.
        catalog_path: Location of the merged district catalog.
        sources_dir: Directory holding the per-source (per-school) files.
        source_glob: Glob used to discover per-source files.
        unmatched_report_limit: Number of unmatched prerequisites to list.
        report_path: Optional path for the markdown run report.
    """

    district: str = ""
    source_url: str = ""
    catalog_path: Path = DEFAULT_CATALOG_PATH
    sources_dir: Path = DEFAULT_SOURCES_DIR
    source_glob: str = SOURCE_FILE_GLOB
    unmatched_report_limit: int = UNMATCHED_REPORT_LIMIT
    report_path: Path | None = None

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Create configuration from environment variables.

        Reads (all optional):
        - CATALOG_DISTRICT, CATALOG_SOURCE_URL
        - CATALOG_PATH, CATALOG_SOURCES_DIR

        Returns:
            Configuration populated from environment.
        """
        from dotenv import load_dotenv

        load_dotenv()

        return cls(
            district=os.getenv("CATALOG_DISTRICT", ""),
            source_url=os.getenv("CATALOG_SOURCE_URL", ""),
            catalog_path=Path(os.getenv("CATALOG_PATH", str(DEFAULT_CATALOG_PATH))),
            sources_dir=Path(os.getenv("CATALOG_SOURCES_DIR", str(DEFAULT_SOURCES_DIR))),
        )

    def require_source(self) -> None:
        """Ensure the catalog ``source`` block can be written.

        Raises:
            ConfigError: If district or source URL is missing.
        """
        if not self.district:
            raise ConfigError("district", "CATALOG_DISTRICT")
        if not self.source_url:
            raise ConfigError("source URL", "CATALOG_SOURCE_URL")

    @property
    def district_slug(self) -> str:
        """District identifier as used in per-source file names."""
        return "".join(ch for ch in self.district.lower() if ch.isalnum())

    def source_file_for(self, school_slug: str) -> Path:
        """Return the per-source file path for a school slug."""
        return self.sources_dir / f"courses.{self.district_slug}.{school_slug}.json"
