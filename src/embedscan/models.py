from pydantic import BaseModel, ConfigDict


class SourcePosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


class PackageDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    import_path: str
    dir: str
    name: str = ""
    go_files: tuple[str, ...] = ()
    test_go_files: tuple[str, ...] = ()
    x_test_go_files: tuple[str, ...] = ()
    cgo_files: tuple[str, ...] = ()
    ignored_go_files: tuple[str, ...] = ()

    def candidate_files(self) -> list[str]:
        """File names eligible for scanning, in selection priority order."""
        return [*self.go_files, *self.test_go_files, *self.x_test_go_files, *self.cgo_files]
