from collections.abc import Callable
from typing import Protocol

from embedscan.models import PackageDescriptor

PackageCallback = Callable[[str, Exception | None], None]


class PackageDiscovery(Protocol):
    def for_each_package(self, found: PackageCallback) -> None: ...

    def import_package(self, import_path: str) -> PackageDescriptor: ...
