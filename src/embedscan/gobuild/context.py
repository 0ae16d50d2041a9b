import os
import platform
import shutil
import subprocess
import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict

_ENV_KEYS = ("GOROOT", "GOPATH", "GOOS", "GOARCH", "CGO_ENABLED")

_PLATFORM_GOOS = {
    "aix": "aix",
    "cygwin": "windows",
    "darwin": "darwin",
    "freebsd": "freebsd",
    "linux": "linux",
    "netbsd": "netbsd",
    "openbsd": "openbsd",
    "sunos": "solaris",
    "win32": "windows",
}

_MACHINE_GOARCH = {
    "aarch64": "arm64",
    "amd64": "amd64",
    "arm64": "arm64",
    "armv7l": "arm",
    "i386": "386",
    "i686": "386",
    "loongarch64": "loong64",
    "ppc64le": "ppc64le",
    "riscv64": "riscv64",
    "s390x": "s390x",
    "x86_64": "amd64",
}


class BuildContext(BaseModel):
    """The subset of a Go build context needed to find and classify packages."""

    model_config = ConfigDict(frozen=True)

    goroot: Path | None = None
    gopath: tuple[Path, ...] = ()
    goos: str = "linux"
    goarch: str = "amd64"
    cgo_enabled: bool = True
    build_tags: tuple[str, ...] = ()

    def src_dirs(self) -> list[Path]:
        dirs: list[Path] = []
        if self.goroot is not None and (self.goroot / "src").is_dir():
            dirs.append(self.goroot / "src")
        for entry in self.gopath:
            if self.goroot is not None and entry == self.goroot:
                continue
            if (entry / "src").is_dir():
                dirs.append(entry / "src")
        return dirs

    def root_label(self, src_dir: Path) -> str:
        if self.goroot is not None and src_dir == self.goroot / "src":
            return "$GOROOT"
        return "$GOPATH"

    @classmethod
    def from_env(
        cls,
        goroot: str | None = None,
        gopath: str | None = None,
        goos: str | None = None,
        goarch: str | None = None,
        cgo_enabled: bool | None = None,
        build_tags: list[str] | None = None,
    ) -> "BuildContext":
        """Build a context from explicit values, then the environment, then ``go env``."""
        explicit = {
            "GOROOT": goroot,
            "GOPATH": gopath,
            "GOOS": goos,
            "GOARCH": goarch,
            "CGO_ENABLED": None if cgo_enabled is None else ("1" if cgo_enabled else "0"),
        }
        values = {key: value if value is not None else os.environ.get(key) for key, value in explicit.items()}
        missing = [key for key in _ENV_KEYS if values[key] is None]
        if missing:
            for key, value in _go_env(missing).items():
                values[key] = value

        root = values["GOROOT"]
        path_list = values["GOPATH"] or str(Path.home() / "go")
        return cls(
            goroot=Path(root) if root else None,
            gopath=tuple(Path(entry) for entry in path_list.split(os.pathsep) if entry),
            goos=values["GOOS"] or _host_goos(),
            goarch=values["GOARCH"] or _host_goarch(),
            cgo_enabled=(values["CGO_ENABLED"] or "1") != "0",
            build_tags=tuple(tag for tag in (build_tags or []) if tag),
        )


def _go_available() -> bool:
    return shutil.which("go") is not None


def _go_env(keys: list[str]) -> dict[str, str]:
    """Ask the go tool for ``keys``; empty when go is not installed."""
    if not _go_available():
        return {}
    result = subprocess.run(
        ["go", "env", *keys],
        check=False,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        return {}
    lines = result.stdout.splitlines()
    if len(lines) != len(keys):
        return {}
    return {key: line.strip() for key, line in zip(keys, lines, strict=True) if line.strip()}


def _host_goos() -> str:
    for prefix, goos in _PLATFORM_GOOS.items():
        if sys.platform.startswith(prefix):
            return goos
    return sys.platform


def _host_goarch() -> str:
    machine = platform.machine().lower()
    return _MACHINE_GOARCH.get(machine, machine)
