from embedscan.core.ports.discovery import PackageCallback
from embedscan.gobuild.context import BuildContext
from embedscan.gobuild.importer import import_package
from embedscan.gobuild.walk import for_each_package
from embedscan.models import PackageDescriptor


class GoBuildDiscovery:
    """Discover packages under GOROOT and GOPATH.

    Implements the ``PackageDiscovery`` protocol.
    """

    def __init__(self, context: BuildContext) -> None:
        self._context = context

    @property
    def context(self) -> BuildContext:
        return self._context

    def for_each_package(self, found: PackageCallback) -> None:
        for_each_package(self._context, found)

    def import_package(self, import_path: str) -> PackageDescriptor:
        return import_package(self._context, import_path)


__all__ = [
    "BuildContext",
    "GoBuildDiscovery",
    "for_each_package",
    "import_package",
]
