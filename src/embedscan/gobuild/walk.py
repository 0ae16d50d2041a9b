import logging
import os
from pathlib import Path

from embedscan.core.ports.discovery import PackageCallback
from embedscan.gobuild.context import BuildContext

logger = logging.getLogger(__name__)

_PRUNED_IMPORT_PATHS = frozenset({"builtin"})


def _skip_dir(name: str) -> bool:
    return not name or name[0] in "._" or name == "testdata"


def walk_src_dir(src_dir: Path, found: PackageCallback) -> None:
    """Report every package directory below ``src_dir`` in sorted pre-order."""
    stack: list[Path] = [src_dir]
    while stack:
        directory = stack.pop()
        import_path = directory.relative_to(src_dir).as_posix() if directory != src_dir else ""
        if import_path in _PRUNED_IMPORT_PATHS:
            continue

        try:
            with os.scandir(directory) as scan:
                subdirs = sorted(
                    entry.name for entry in scan if entry.is_dir(follow_symlinks=False) and not _skip_dir(entry.name)
                )
        except OSError as exc:
            logger.debug("Cannot list %s: %s", directory, exc)
            found(import_path, exc)
            continue

        if import_path:
            found(import_path, None)
        stack.extend(directory / name for name in reversed(subdirs))


def for_each_package(context: BuildContext, found: PackageCallback) -> None:
    for src_dir in context.src_dirs():
        logger.debug("Walking %s", src_dir)
        walk_src_dir(src_dir, found)
