"""Source files, libraries, and library execution contexts.

A :class:`Library` is an immutable tree: each directory is a library and
directories named ``_lib`` are private (reachable only by explicit
reference, never by :meth:`Library.list_accessible_files`). The only
mutable state on a :class:`File` is its output flag, cleared when schema
or values discovery claims the file.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from pathlib import PurePosixPath

from docweave.domain.types import EXTENSION_TYPES, PRIVATE_LIBRARY_DIR, FileType

_LIBRARY_INFIX = ".lib."


@dataclass(eq=False)
class File:
    """A source file. Identity-hashed so it can key per-file results."""

    relative_path: str
    data: bytes = b""
    type: FileType = FileType.UNKNOWN
    template: bool = True
    library: bool | None = None
    _for_output: bool | None = field(default=None, repr=False)

    @classmethod
    def from_path(cls, relative_path: str, data: bytes = b"", *, template: bool = True) -> File:
        """Create a file, inferring its type from the extension."""
        suffix = PurePosixPath(relative_path).suffix.lower()
        return cls(
            relative_path=relative_path,
            data=data,
            type=EXTENSION_TYPES.get(suffix, FileType.UNKNOWN),
            template=template,
        )

    @property
    def name(self) -> str:
        return PurePosixPath(self.relative_path).name

    def is_template(self) -> bool:
        return self.template

    def is_library(self) -> bool:
        if self.library is not None:
            return self.library
        return self.type == FileType.SCRIPT or _LIBRARY_INFIX in self.name

    def is_for_output(self) -> bool:
        if self._for_output is not None:
            return self._for_output
        if self.is_library():
            return False
        return self.type in (FileType.YAML, FileType.TEXT)

    def mark_for_output(self, for_output: bool) -> None:
        self._for_output = for_output


@dataclass(frozen=True, eq=False)
class Library:
    """A directory of files forming one template unit.

    *path* is relative to the root library (``""`` for the root itself).
    """

    name: str = ""
    path: str = ""
    files: tuple[File, ...] = ()
    children: tuple[Library, ...] = ()

    @property
    def private(self) -> bool:
        return self.name == PRIVATE_LIBRARY_DIR

    @property
    def path_parts(self) -> tuple[str, ...]:
        return PurePosixPath(self.path).parts if self.path else ()

    @classmethod
    def from_files(cls, files: Mapping[str, bytes] | Iterable[File]) -> Library:
        """Build a library tree from root-relative paths.

        Each directory becomes a nested library; a file keeps only its
        name as ``relative_path``.
        """
        if isinstance(files, Mapping):
            items = [File.from_path(path, data) for path, data in files.items()]
        else:
            items = list(files)
        return _build_tree("", "", items)

    def child(self, name: str) -> Library | None:
        for lib in self.children:
            if lib.name == name:
                return lib
        return None

    def find(self, path: str) -> Library | None:
        """Find a nested library by its path relative to this one."""
        lib: Library | None = self
        for part in PurePosixPath(path).parts:
            if lib is None:
                return None
            lib = lib.child(part)
        return lib

    def list_accessible_files(self) -> list[FileInLibrary]:
        """Files of this library and its non-private descendants."""
        return list(self._iter_accessible())

    def _iter_accessible(self) -> Iterator[FileInLibrary]:
        for f in self.files:
            yield FileInLibrary(file=f, library=self)
        for lib in self.children:
            if not lib.private:
                yield from lib._iter_accessible()


def _build_tree(name: str, path: str, files: list[File]) -> Library:
    own: list[File] = []
    nested: dict[str, list[File]] = {}
    for f in files:
        head, _, rest = f.relative_path.partition("/")
        if rest:
            nested.setdefault(head, []).append(replace(f, relative_path=rest))
        else:
            own.append(f)
    children = tuple(
        _build_tree(child, f"{path}/{child}" if path else child, child_files)
        for child, child_files in nested.items()
    )
    return Library(name=name, path=path, files=tuple(own), children=children)


@dataclass(frozen=True)
class FileInLibrary:
    """A file together with the library that owns it."""

    file: File
    library: Library

    @property
    def relative_path(self) -> str:
        """Path of the file relative to the root library."""
        if self.library.path:
            return f"{self.library.path}/{self.file.relative_path}"
        return self.file.relative_path

    def sort_key(self) -> tuple[tuple[str, ...], str]:
        return self.library.path_parts, self.file.relative_path


def sort_files_in_library(files: Iterable[FileInLibrary]) -> list[FileInLibrary]:
    """Order files by (library path, relative path), independent of input order."""
    return sorted(files, key=FileInLibrary.sort_key)


@dataclass(frozen=True)
class LibraryExecutionContext:
    """Which library is being evaluated, and the root it was reached from."""

    current: Library
    root: Library

    @classmethod
    def for_root(cls, library: Library) -> LibraryExecutionContext:
        return cls(current=library, root=library)

    def with_current(self, library: Library) -> LibraryExecutionContext:
        return LibraryExecutionContext(current=library, root=self.root)


@dataclass(frozen=True)
class OutputFile:
    """A rendered output file."""

    relative_path: str
    data: bytes
    type: FileType
