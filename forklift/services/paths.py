from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..errors import FormatError, RootMismatchError
from ..models.config_models import ImportConfig

"""Destination path resolution.

Maps a source workbook path to the canonical location of its converted record:

    {project_root}/{resources_dir}/{sub_directory}/{stem}{record_extension}

Only the deepest directory below the project root is mirrored. With root
``Assets/Data`` the source ``Assets/Data/Sheets/Foo/report.xlsx`` goes to
``Assets/Data/Resources/Foo/report.asset``, while ``Assets/Data/Sheets/report.xlsx``
(single directory level) and ``Assets/Data/report.xlsx`` both go to
``Assets/Data/Resources/report.asset``. Existing output trees depend on this
shallow layout.

All paths are handled as posix strings relative to the working directory.
"""

__all__ = [
    "Destination",
    "DestinationResolver",
    "normalize_source_path",
    "is_importable_file",
    "check_format",
    "check_root",
    "internal_path",
    "mirrored_sub_directory",
    "destination_for",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Destination:
    directory: str
    file_path: str


def normalize_source_path(source_path: str | Path) -> str:
    if isinstance(source_path, Path):
        return source_path.as_posix()
    return source_path.replace("\\", "/")


def is_importable_file(source_path: str | Path, config: ImportConfig) -> bool:
    """True if the path has the importable extension and is not a temp/lock file."""
    path = normalize_source_path(source_path)
    return path.endswith(config.importable_extension) and config.temp_marker not in path


def check_format(source_path: str | Path, config: ImportConfig) -> None:
    if not is_importable_file(source_path, config):
        raise FormatError(f"'{normalize_source_path(source_path)}' is not an importable {config.importable_extension} file")


def check_root(source_path: str | Path, config: ImportConfig) -> None:
    path = normalize_source_path(source_path)
    if not path.startswith(config.project_root):
        raise RootMismatchError(
            f"cannot find project root '{config.project_root}' in source path '{path}'"
        )


def internal_path(directory: str, project_root: str) -> str:
    """Directory relative to the project root (keeps the leading '/')."""
    return directory[len(project_root):] if directory.startswith(project_root) else directory


def mirrored_sub_directory(internal: str) -> str:
    """Last segment of ``internal`` if it has more than one segment, else ''."""
    segments = [s for s in internal.split("/") if s]
    if len(segments) > 1:
        return segments[-1]
    return ""


def destination_for(source_path: str | Path, config: ImportConfig) -> Destination:
    """Pure part of the resolution: checks plus path arithmetic, no I/O."""
    check_format(source_path, config)
    check_root(source_path, config)
    path = normalize_source_path(source_path)

    directory, file_name = posixpath.split(path)
    sub_directory = mirrored_sub_directory(internal_path(directory, config.project_root))

    save_dir = f"{config.project_root}/{config.resources_dir}/{sub_directory}"
    stem = posixpath.splitext(file_name)[0]
    return Destination(
        directory=save_dir,
        file_path=posixpath.join(save_dir, stem + config.record_extension),
    )


def _make_directory(path: str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


class DestinationResolver:
    """Resolves destinations and makes sure the target directory exists."""

    def __init__(
        self,
        config: ImportConfig,
        ensure_directory: Callable[[str], None] | None = None,
    ) -> None:
        self.config = config
        self.ensure_directory = ensure_directory or _make_directory

    def resolve(self, source_path: str | Path) -> Destination:
        """Return the destination for ``source_path``.

        Raises:
            FormatError: not an importable workbook (nothing is created)
            RootMismatchError: source outside the project root (nothing is created)
        """
        destination = destination_for(source_path, self.config)
        self.ensure_directory(destination.directory)
        logger.debug(f"destination for {source_path} -> {destination.file_path}")
        return destination
