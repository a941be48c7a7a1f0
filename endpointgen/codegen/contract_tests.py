"""Contract test generation.

For every endpoint a jest test module is written to
``contractTests/<name>.contract.test.ts``. The module fails to type-check when
the mock's parameter or return type drifts from the client's, and, for
compute-backed endpoints whose handler module can be found, when the handler's
declared output is not assignable to what the client returns.
"""

import dataclasses
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from upath import UPath

from endpointgen.codegen import ts_ast
from endpointgen.codegen.types import (
    ComputeBacked,
    EndpointRecord,
    Resolution,
    Resolved,
    Unresolved,
)
from endpointgen.codegen.utils import CodeBuilder, js_string, type_prefix

__all__ = [
    'CONTRACT_TESTS_DIR',
    'HandlerModule',
    'find_handler_module',
    'generate_contract_tests',
    'resolve_entry',
]

logger = logging.getLogger(__name__)

CONTRACT_TESTS_DIR = 'contractTests'
HANDLER_EXPORT = 'apiHandler'
HANDLER_TYPE = 'ApiHandler'

_JOIN_FUNCTIONS = frozenset({'join', 'resolve'})
_SOURCE_SUFFIXES = ('', '.ts', '.tsx', '/index.ts')


@dataclasses.dataclass(frozen=True)
class HandlerModule:
    """A handler module as seen from the contract test directory.

    Attributes:
        specifier: Relative import specifier of the handler module.
        handler_type_module: Module the handler imports ``ApiHandler`` from,
            or ``None`` when ``apiHandler`` is not declared with that type.
    """

    specifier: str
    handler_type_module: str | None = None


def _entry_segments(entry: str, declaration_dir: UPath) -> list[str] | None:
    """Path segments of an entry expression, or ``None`` if not understood."""
    tokens = ts_ast.tokenize(entry)
    if len(tokens) == 1 and tokens[0].kind in ('string', 'template'):
        if tokens[0].has_substitution:
            return None
        return [str(declaration_dir), tokens[0].value]

    index = 0
    if (
        len(tokens) > 2
        and tokens[0].is_ident('path')
        and tokens[1].is_punct('.')
    ):
        index = 2
    if (
        len(tokens) < index + 3
        or not tokens[index].is_ident(*_JOIN_FUNCTIONS)
        or not tokens[index + 1].is_punct('(')
        or not tokens[-1].is_punct(')')
    ):
        return None

    segments = []
    for token in tokens[index + 2 : -1]:
        if token.is_punct(','):
            continue
        if token.is_ident('__dirname'):
            segments.append(str(declaration_dir))
        elif token.kind == 'string' or (token.kind == 'template' and not token.has_substitution):
            segments.append(token.value)
        else:
            return None
    if segments and not os.path.isabs(segments[0]):
        segments.insert(0, str(declaration_dir))
    return segments or None


def resolve_entry(
    record: EndpointRecord, declaration_dir: str | Path | UPath
) -> Resolution[UPath]:
    """Find the handler module of a compute-backed endpoint.

    Understands string literals (relative to the declaration module) and
    ``join``/``path.join``/``resolve``/``path.resolve`` calls over string
    literals and ``__dirname``.
    """
    backing = record.backing
    if not isinstance(backing, ComputeBacked):
        return Unresolved('endpoint is not compute-backed')
    if not backing.entry:
        return Unresolved('no entry declared')

    declaration_dir = UPath(declaration_dir)
    segments = _entry_segments(backing.entry, declaration_dir)
    if segments is None:
        return Unresolved(f'entry expression not understood: {backing.entry}')

    base = os.path.normpath(os.path.join(*segments))
    for suffix in _SOURCE_SUFFIXES:
        candidate = UPath(base + suffix)
        if candidate.is_file():
            return Resolved(candidate)
    return Unresolved(f'handler module not found: {base}')


def find_handler_module(handler_path: UPath, tests_dir: str | Path | UPath) -> HandlerModule:
    """Describe ``handler_path`` for import from ``tests_dir``."""
    stem = str(handler_path)
    for suffix in ('.tsx', '.ts'):
        if stem.endswith(suffix):
            stem = stem[: -len(suffix)]
            break
    specifier = _relative_specifier(stem, tests_dir)

    handler_type_module = None
    try:
        source = handler_path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f'Could not read handler module {handler_path}: {e}')
        source = ''
    annotation = ts_ast.find_variable_annotation(source, HANDLER_EXPORT) or ''
    if annotation.startswith(HANDLER_TYPE):
        for named_import in ts_ast.parse_named_imports(source):
            if named_import.name == HANDLER_TYPE:
                handler_type_module = named_import.module
                if handler_type_module.startswith('.'):
                    resolved = os.path.normpath(
                        os.path.join(str(handler_path.parent), handler_type_module)
                    )
                    handler_type_module = _relative_specifier(resolved, tests_dir)
                break
    return HandlerModule(specifier, handler_type_module)


def _relative_specifier(target: str, tests_dir: str | Path | UPath) -> str:
    specifier = os.path.relpath(target, str(tests_dir)).replace(os.sep, '/')
    if not specifier.startswith('.'):
        specifier = f'./{specifier}'
    return specifier


def _contract_test(
    record: EndpointRecord, handler: HandlerModule | None, project_name: str
) -> str:
    client_class = f'{type_prefix(project_name)}ApiClient'
    mock_class = f'{client_class}Mock'
    factory = f'createApi{type_prefix(project_name)}ClientMock'
    name = record.name

    builder = CodeBuilder()
    builder.add_doc(
        f'Auto-generated contract test for the {name} endpoint',
        'Do not edit this file directly',
    )
    builder.add_line(f"import {{ {client_class} }} from '../apiClient';")
    builder.add_line(f"import {{ {mock_class}, {factory} }} from '../apiClientMock';")
    if handler is not None:
        builder.add_line(f'import {{ {HANDLER_EXPORT} }} from {js_string(handler.specifier)};')
        if handler.handler_type_module:
            builder.add_line(
                f'import {{ {HANDLER_TYPE} }} from {js_string(handler.handler_type_module)};'
            )
    builder.add_line()

    builder.add_line(
        'type Equals<A, B> = (<T>() => T extends A ? 1 : 2) extends '
        '<T>() => T extends B ? 1 : 2 ? true : false;'
    )
    builder.add_line('type Assignable<A, B> = [A] extends [B] ? true : false;')
    builder.add_line('type Assert<T extends true> = T;')
    builder.add_line()
    builder.add_line(f"type ClientParams = Parameters<{client_class}['{name}']>;")
    builder.add_line(f"type MockParams = Parameters<{mock_class}['{name}']>;")
    builder.add_line(f"type ClientResult = Awaited<ReturnType<{client_class}['{name}']>>;")
    builder.add_line(f"type MockResult = Awaited<ReturnType<{mock_class}['{name}']>>;")
    builder.add_line()
    builder.add_line('export type ParamsMatch = Assert<Equals<ClientParams, MockParams>>;')
    builder.add_line('export type ResultMatch = Assert<Equals<ClientResult, MockResult>>;')
    if handler is not None and handler.handler_type_module:
        builder.add_line(
            f'type HandlerOutput = typeof {HANDLER_EXPORT} extends '
            f'{HANDLER_TYPE}<any, infer O> ? O : never;'
        )
        builder.add_line(
            'export type HandlerOutputMatches = '
            'Assert<Assignable<HandlerOutput, ClientResult>>;'
        )
    builder.add_line()

    with builder.add_block(f"describe('{name} contract', () => {{", '});'):
        with builder.add_block(f"it('mock exposes {name}', () => {{", '});'):
            builder.add_line(f'const mock = {factory}();')
            builder.add_line(f"expect(typeof mock.{name}).toBe('function');")
        builder.add_line()
        with builder.add_block(f"it('client exposes {name}', () => {{", '});'):
            builder.add_line(f"expect(typeof {client_class}.prototype.{name}).toBe('function');")
        builder.add_line()
        with builder.add_block(
            "it('mock records calls made with the client parameters', async () => {",
            '});',
        ):
            builder.add_line(f'const mock = {factory}();')
            builder.add_line(f"mock.{name}.mockResolvedValue(undefined as unknown as MockResult);")
            builder.add_line('const params = {} as ClientParams[0];')
            builder.add_line(f'await mock.{name}(params);')
            builder.add_line(f'expect(mock.{name}).toHaveBeenCalledWith(params);')
        if handler is not None:
            builder.add_line()
            with builder.add_block(f"it('handler module exports {HANDLER_EXPORT}', () => {{", '});'):
                builder.add_line(f"expect(typeof {HANDLER_EXPORT}).toBe('function');")

    return builder.get_code()


def generate_contract_tests(
    records: Mapping[str, EndpointRecord],
    handler_modules: Mapping[str, HandlerModule],
    project_name: str,
) -> dict[str, str]:
    """Generate one contract test module per endpoint.

    Args:
        records: Endpoint records in declaration order.
        handler_modules: Handler modules of the compute-backed endpoints that
            could be resolved, keyed by endpoint name.
        project_name: Project name the client and mock classes derive from.

    Returns:
        Mapping of output-relative path to test source, in record order.
    """
    tests = {}
    for record in records.values():
        handler = handler_modules.get(record.name)
        if isinstance(record.backing, ComputeBacked) and handler is None:
            logger.info(f"No handler module for '{record.name}'; testing client and mock only")
        tests[f'{CONTRACT_TESTS_DIR}/{record.name}.contract.test.ts'] = _contract_test(
            record, handler, project_name
        )
    return tests
