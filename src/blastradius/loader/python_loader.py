"""Python module loader using the built-in ast module.

A module is a package directory (regular or namespace) found under one of the
search paths. Single-file modules are owned by the package directory that
contains them, except for top-level files which are their own module.
"""

from __future__ import annotations

import ast
import fnmatch
import logging
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from blastradius.exceptions import LoaderError, ModuleNotFound
from blastradius.graph.models import NATIVE_IMPORT, ModuleDescriptor
from blastradius.loader.base import ModuleLoader

logger = logging.getLogger("blastradius.loader")

DEFAULT_SUFFIXES = (".py", ".pyi")
DEFAULT_TEST_PATTERNS = ("test_*.py", "*_test.py", "conftest.py")

# Handler types that make an import inside the try body optional
_GUARD_EXCEPTIONS = {"ImportError", "ModuleNotFoundError", "Exception", "BaseException"}


def native_module_names() -> frozenset[str]:
    """Top-level names provided by the interpreter itself."""
    names = set(sys.builtin_module_names)
    names.update(getattr(sys, "stdlib_module_names", ()))
    return frozenset(names)


@dataclass
class ImportScan:
    """Import names found in one source file, as module identities."""

    required: list[str] = field(default_factory=list)
    optional: list[str] = field(default_factory=list)


class _ImportCollector(ast.NodeVisitor):
    def __init__(self, package: str, foreign: frozenset[str]) -> None:
        self.package = package
        self.foreign = foreign
        self.scan = ImportScan()
        self.errors: list[str] = []
        self._guarded = 0

    def visit_Try(self, node: ast.Try) -> None:
        guarded = _catches_import_error(node)
        if guarded:
            self._guarded += 1
        for stmt in node.body:
            self.visit(stmt)
        if guarded:
            self._guarded -= 1
        for stmt in [*node.handlers, *node.orelse, *node.finalbody]:
            self.visit(stmt)

    visit_TryStar = visit_Try

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            name = self._absolute(alias.name)
            self._add(name, optional=False)
            self._add_parents(name)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if node.level:
            base = self._relative_base(node.level, node.lineno)
            if base is None:
                return
            module = "/".join(p for p in [base, (node.module or "").replace(".", "/")] if p)
        else:
            module = self._absolute(node.module or "")
            if module == NATIVE_IMPORT:
                self._add(module, optional=False)
                return
            self._add_parents(module)

        if module:
            self._add(module, optional=False)
        # Any imported name may itself be a submodule
        for alias in node.names:
            if alias.name == "*":
                continue
            submodule = f"{module}/{alias.name}" if module else alias.name
            self._add(submodule, optional=True)

    def _absolute(self, dotted: str) -> str:
        if dotted.split(".")[0] in self.foreign:
            return NATIVE_IMPORT
        return dotted.replace(".", "/")

    def _relative_base(self, level: int, lineno: int) -> str | None:
        parts = self.package.split("/") if self.package else []
        if level - 1 > len(parts):
            self.errors.append(f"line {lineno}: relative import beyond top-level package")
            return None
        return "/".join(parts[: len(parts) - (level - 1)])

    def _add_parents(self, name: str) -> None:
        """Importing a/b/c also initializes the packages a and a/b.

        Parents are optional: a namespace directory with no sources of its own
        is not a module.
        """
        if name == NATIVE_IMPORT:
            return
        parts = name.split("/")
        for i in range(1, len(parts)):
            parent = "/".join(parts[:i])
            if parent not in self.scan.required and parent not in self.scan.optional:
                self._add(parent, optional=True)

    def _add(self, name: str, optional: bool) -> None:
        if not name or name == self.package:
            return
        if optional or self._guarded:
            self.scan.optional.append(name)
        else:
            self.scan.required.append(name)


def _catches_import_error(node: ast.Try) -> bool:
    for handler in node.handlers:
        if handler.type is None:
            return True
        types = handler.type.elts if isinstance(handler.type, ast.Tuple) else [handler.type]
        for exc in types:
            name = exc.attr if isinstance(exc, ast.Attribute) else getattr(exc, "id", "")
            if name in _GUARD_EXCEPTIONS:
                return True
    return False


def scan_imports(
    source: str,
    package: str,
    filename: str = "<unknown>",
    foreign: Iterable[str] = (),
) -> tuple[ImportScan, list[str]]:
    """Extract import identities from Python source.

    Args:
        source: Python source text.
        package: Identity of the package the file belongs to. Relative
            imports are resolved against it.
        filename: Used in error messages.
        foreign: Top-level names mapped to the native sentinel.

    Returns:
        (scan, errors). A file with a syntax error yields an empty scan and
        one error message.
    """
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        return ImportScan(), [f"SyntaxError: {e}"]

    collector = _ImportCollector(package, frozenset(foreign))
    collector.visit(tree)
    return collector.scan, collector.errors


def _unique(names: Iterable[str], exclude: Iterable[str] = ()) -> list[str]:
    seen = set(exclude)
    result = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


class PythonModuleLoader(ModuleLoader):
    """Loads Python packages from a list of search paths."""

    def __init__(
        self,
        search_paths: Sequence[str | Path],
        foreign_modules: Iterable[str] = (),
        source_suffixes: Sequence[str] = DEFAULT_SUFFIXES,
        test_patterns: Sequence[str] = DEFAULT_TEST_PATTERNS,
    ) -> None:
        self.search_paths = [Path(p).resolve() for p in search_paths]
        self.foreign = native_module_names() | frozenset(foreign_modules)
        self.source_suffixes = tuple(source_suffixes)
        self.test_patterns = tuple(test_patterns)

    def load(self, candidate: str) -> ModuleDescriptor:
        parts = candidate.split("/")
        if not candidate or any(p in ("", ".", "..") for p in parts):
            raise ModuleNotFound(candidate)

        for root in self.search_paths:
            directory = root.joinpath(*parts)
            if directory.is_dir() and self._is_package(directory):
                return self._describe(candidate, directory)

            for suffix in self.source_suffixes:
                file_path = directory.with_name(directory.name + suffix)
                if not file_path.is_file():
                    continue
                parent, _, _ = candidate.rpartition("/")
                if parent:
                    return self._describe(parent, file_path.parent)
                return self._describe(candidate, file_path.parent, only=file_path)

        raise ModuleNotFound(candidate)

    def is_source(self, file_name: str) -> bool:
        return file_name.endswith(self.source_suffixes)

    def is_test(self, file_name: str) -> bool:
        return any(fnmatch.fnmatch(file_name, pattern) for pattern in self.test_patterns)

    def _is_package(self, directory: Path) -> bool:
        """A directory is a package if it, or a direct child directory, holds sources."""
        try:
            for entry in directory.iterdir():
                if entry.is_file() and self.is_source(entry.name):
                    return True
                if entry.is_dir() and any(
                    child.is_file() and self.is_source(child.name)
                    for child in entry.iterdir()
                ):
                    return True
        except OSError as e:
            raise LoaderError(f"Cannot list {directory}: {e}") from e
        return False

    def _describe(
        self, identity: str, directory: Path, only: Path | None = None
    ) -> ModuleDescriptor:
        """Scan the package's source files into a descriptor."""
        # A top-level single-file module has no package for relative imports
        package = "" if only is not None else identity
        if only is not None:
            files = [only]
        else:
            try:
                files = sorted(
                    p for p in directory.iterdir() if p.is_file() and self.is_source(p.name)
                )
            except OSError as e:
                raise LoaderError(f"Cannot list {directory}: {e}") from e

        imports: list[str] = []
        test_imports: list[str] = []
        optional: list[str] = []
        errors: list[str] = []

        for file_path in files:
            try:
                source = file_path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                raise LoaderError(f"Cannot read {file_path}: {e}") from e

            scan, file_errors = scan_imports(source, package, str(file_path), self.foreign)
            for error in file_errors:
                logger.warning("%s: %s", file_path, error)
                errors.append(f"{file_path.name}: {error}")

            if self.is_test(file_path.name):
                test_imports.extend(scan.required)
            else:
                imports.extend(scan.required)
            optional.extend(scan.optional)

        imports = _unique(imports)
        test_imports = _unique(test_imports, exclude=imports)
        optional = _unique(optional, exclude=[*imports, *test_imports])

        return ModuleDescriptor(
            identity=identity,
            imports=imports,
            test_imports=test_imports,
            optional_imports=[n for n in optional if n != NATIVE_IMPORT],
            files=[p.name for p in files],
            errors=errors,
        )
