"""Exception hierarchy shared by the scanner and the Go build layer."""

from __future__ import annotations


class EmbedscanError(Exception):
    """Base class for all errors raised by embedscan."""


class InvalidPatternError(EmbedscanError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid import pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class PackageResolutionError(EmbedscanError):
    """An import path could not be turned into a package description."""

    def __init__(self, import_path: str, message: str) -> None:
        super().__init__(message)
        self.import_path = import_path


class NoGoError(PackageResolutionError):
    """The directory holds no Go files buildable in the current context."""

    def __init__(self, import_path: str, directory: str, excluded: bool = False) -> None:
        if excluded:
            message = f"build constraints exclude all Go files in {directory}"
        else:
            message = f"no buildable Go source files in {directory}"
        super().__init__(import_path, message)
        self.directory = directory
        self.excluded = excluded


class PackageNotFoundError(PackageResolutionError):
    def __init__(self, import_path: str, searched: list[str]) -> None:
        lines = [f'cannot find package "{import_path}" in any of:']
        lines.extend(f"\t{location}" for location in searched)
        super().__init__(import_path, "\n".join(lines))


class MultiplePackageError(PackageResolutionError):
    def __init__(self, import_path: str, directory: str, packages: list[str], files: list[str]) -> None:
        found = " and ".join(f"{pkg} ({name})" for pkg, name in zip(packages, files, strict=True))
        super().__init__(import_path, f"found packages {found} in {directory}")
        self.packages = packages
        self.files = files


class CgoInTestError(PackageResolutionError):
    def __init__(self, import_path: str, path: str) -> None:
        super().__init__(import_path, f"use of cgo in test {path} not supported")


class ParseFailure(EmbedscanError):
    """The selected file of a package is not valid Go."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class ReconstructionError(EmbedscanError):
    """A matched declaration could not be rendered back to source text."""
