from __future__ import annotations

from dataclasses import dataclass, field, replace

"""Config dataclasses for the forklift import pipeline.

ImportConfig is immutable and handed to the processor at construction time.
The YAML loader lives in forklift/config/loader.py and only builds these.
"""

__all__ = [
    "DEFAULT_PROJECT_ROOT",
    "normalize_project_root",
    "ReaderConfig",
    "PipelineConfig",
    "ImportConfig",
]

DEFAULT_PROJECT_ROOT = "Assets"


def normalize_project_root(root: str) -> str:
    """Strip trailing slashes; a root left empty (``""``, ``"/"``) is refused."""
    normalized = root.rstrip("/")
    if not normalized:
        raise ValueError(f"project root must name a directory, got {root!r}")
    return normalized


@dataclass(frozen=True)
class ReaderConfig:
    """How workbooks are turned into ImportData."""
    sheet: str | None = None  # None -> first sheet
    header_row: int = 1  # 1-based row holding the column names
    keep_na_strings: tuple[str, ...] = ()  # pandas NA 変換から除外する文字列


@dataclass(frozen=True)
class PipelineConfig:
    """Binds a source path pattern to user code.

    Each reference is a ``"package.module:attr"`` string resolved at startup by
    forklift.services.registry.
    """
    pattern: str  # fnmatch pattern on the posix source path
    record_type: str
    converter: str
    validator: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    project_root: str = DEFAULT_PROJECT_ROOT
    source_directory: str | None = None  # None -> project_root
    resources_dir: str = "Resources"
    record_extension: str = ".asset"
    importable_extension: str = ".xlsx"
    temp_marker: str = "~$"
    reader: ReaderConfig = field(default_factory=ReaderConfig)
    error_log_dir: str = "logs"
    pipelines: tuple[PipelineConfig, ...] = ()

    @property
    def scan_directory(self) -> str:
        return self.source_directory or self.project_root

    def with_project_root(self, root: str) -> ImportConfig:
        """Return a copy pointing at another project root."""
        return replace(self, project_root=normalize_project_root(root))
