"""Locating and reading the type declarations endpoints refer to.

Input and output types are named in the declaration module but live in other
source files. :class:`InterfaceResolver` finds the file declaring a type by
trying conventional file names first and scanning file contents second.
:func:`parse_declaration` then reads the properties of the type so the
template generator can map each one to the store's attribute encoding.
"""

import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

from upath import UPath

from endpointgen.codegen import ts_ast
from endpointgen.codegen.types import (
    Property,
    PropertyKind,
    Resolution,
    Resolved,
    TypeDeclaration,
    Unresolved,
)

__all__ = [
    'InterfaceResolver',
    'classify_type',
    'default_search_roots',
    'parse_declaration',
]

logger = logging.getLogger(__name__)

_NULLISH = frozenset({'null', 'undefined'})
_STRING_LITERAL = re.compile(r'^(["\'`]).*\1$', re.DOTALL)
_NUMBER_LITERAL = re.compile(r'^-?\d[\d_]*(\.\d+)?$')


def _dedupe(paths: Iterable[UPath]) -> list[UPath]:
    seen = set()
    result = []
    for path in paths:
        key = str(path)
        if key not in seen:
            seen.add(key)
            result.append(path)
    return result


def default_search_roots(
    declaration_path: str | Path | UPath, cwd: str | Path | None = None
) -> list[UPath]:
    """Derive the directories searched for type declarations.

    In order: the declaration module's directory and its ``interfaces``,
    ``types`` and ``models`` subdirectories, then ``src/interfaces``,
    ``src/types`` and ``lib/interfaces`` under ``cwd``, then the directories
    of the module's relative imports.
    """
    declaration_path = UPath(declaration_path)
    base = declaration_path.parent
    cwd = UPath(cwd if cwd is not None else os.getcwd())

    roots = [
        base,
        base / 'interfaces',
        base / 'types',
        base / 'models',
        cwd / 'src' / 'interfaces',
        cwd / 'src' / 'types',
        cwd / 'lib' / 'interfaces',
    ]

    try:
        source = declaration_path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError):
        source = ''
    for named_import in ts_ast.parse_named_imports(source):
        if named_import.module.startswith('.'):
            roots.append(UPath(os.path.normpath(str(base / named_import.module))).parent)

    return _dedupe(roots)


class InterfaceResolver:
    """Finds the source file that declares a named type.

    Attributes:
        search_roots: Directories searched, in priority order.
        extension: Source file extension, including the dot.
    """

    def __init__(
        self, search_roots: Iterable[str | Path | UPath], extension: str = '.ts'
    ):
        self.search_roots = _dedupe(UPath(root) for root in search_roots)
        self.extension = extension

    def candidates(self, type_name: str) -> list[str]:
        """File names tried for a direct match, in priority order."""
        ext = self.extension
        return [
            f'{type_name}{ext}',
            f'{type_name.lower()}{ext}',
            f'{type_name}Interface{ext}',
            f'I{type_name}{ext}',
            f'{type_name}Type{ext}',
        ]

    def resolve(self, type_name: str) -> Resolution[UPath]:
        """Find the file declaring ``type_name``.

        Direct file-name matches in any root win over a content match.
        """
        for root in self.search_roots:
            for candidate in self.candidates(type_name):
                path = root / candidate
                if path.is_file():
                    logger.debug(f'Found {type_name} at {path}')
                    return Resolved(path)

        header = re.compile(
            rf'\b(export\s+)?(interface|type|class|enum)\s+{re.escape(type_name)}\b'
        )
        for root in self.search_roots:
            for path in self._source_files(root):
                try:
                    content = path.read_text(encoding='utf-8')
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning(f'Could not read {path} while looking for {type_name}: {e}')
                    continue
                if header.search(content):
                    logger.debug(f'Found declaration of {type_name} in {path}')
                    return Resolved(path)

        logger.warning(f'Could not find a declaration for type: {type_name}')
        return Unresolved(f"no declaration of '{type_name}' in the search roots")

    def _source_files(self, root: UPath) -> list[UPath]:
        if not root.is_dir():
            return []
        try:
            entries = list(root.iterdir())
        except OSError as e:
            logger.warning(f'Error scanning directory {root}: {e}')
            return []
        return sorted(
            (p for p in entries if p.name.endswith(self.extension) and p.is_file()),
            key=lambda p: p.name,
        )


def classify_type(type_text: str) -> PropertyKind:
    """Map a property's type text to the kind used for attribute encoding.

    ``null`` and ``undefined`` union members are ignored. A union whose
    remaining members do not all share one kind is unresolved.
    """
    text = type_text.strip()
    while (
        text.startswith('(')
        and text.endswith(')')
        and len(ts_ast.split_union(text)) == 1
    ):
        text = text[1:-1].strip()

    members = [m for m in ts_ast.split_union(text) if m not in _NULLISH]
    if not members:
        return PropertyKind.UNRESOLVED
    if len(members) > 1:
        kinds = {classify_type(member) for member in members}
        return kinds.pop() if len(kinds) == 1 else PropertyKind.UNRESOLVED

    member = members[0]
    if member == 'string' or _STRING_LITERAL.match(member):
        return PropertyKind.STRING
    if member in ('number', 'bigint') or _NUMBER_LITERAL.match(member):
        return PropertyKind.NUMBER
    if member in ('boolean', 'true', 'false'):
        return PropertyKind.BOOLEAN
    if (
        member.endswith('[]')
        or member.startswith(('Array<', 'ReadonlyArray<'))
        or member.startswith('[')
    ):
        return PropertyKind.ARRAY
    if member.startswith('{') or member.startswith('Record<'):
        return PropertyKind.OBJECT
    return PropertyKind.UNRESOLVED


def parse_declaration(path: str | Path | UPath, type_name: str) -> TypeDeclaration | None:
    """Read the properties of ``type_name`` declared in ``path``.

    Returns ``None`` when the file cannot be read or holds no object-shaped
    declaration of the type.
    """
    path = UPath(path)
    try:
        source = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f'Could not read {path}: {e}')
        return None

    members = ts_ast.find_type_members(source, type_name)
    if members is None:
        logger.warning(f'{path} does not declare an object type {type_name}')
        return None

    return TypeDeclaration(
        name=type_name,
        properties=tuple(
            Property(
                name=member.name,
                type_text=member.type_text,
                kind=classify_type(member.type_text),
                optional=member.optional,
            )
            for member in members
        ),
    )
