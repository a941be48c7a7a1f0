"""Mock client generation.

The mock is derived from the *generated* client source rather than from the
endpoint records, so it always mirrors the call surface that was actually
emitted. Each client method becomes a ``jest.Mock`` member with the same
parameter and resolved return types.
"""

import dataclasses
import logging
import re
from pathlib import Path

from upath import UPath

from endpointgen.codegen import ts_ast
from endpointgen.codegen.emitter import FileEmitter
from endpointgen.codegen.types import ArtifactKind, GeneratedArtifact
from endpointgen.codegen.utils import CodeBuilder, type_prefix

__all__ = [
    'ApiClientSurface',
    'ClientMethod',
    'generate_api_client_mocks',
    'generate_mock_code',
    'parse_api_client',
]

logger = logging.getLogger(__name__)

CLIENT_FILE = 'apiClient.ts'
MOCK_FILE = 'apiClientMock.ts'
INDEX_FILE = 'index.ts'
MOCK_EXPORT = "export * from './apiClientMock';\n"

_IDENTIFIER = re.compile(r'[A-Za-z_$][\w$]*')
_EXPORTED_TYPE = re.compile(r'\bexport\s+(?:interface|type|class|enum)\s+([A-Za-z_$][\w$]*)')


@dataclasses.dataclass(frozen=True)
class ClientMethod:
    name: str
    param_type: str | None
    return_type: str


@dataclasses.dataclass
class ApiClientSurface:
    """Methods and type imports of a generated ``<Project>ApiClient``."""

    client_class: str
    methods: list[ClientMethod]
    imports: list[ts_ast.NamedImport]
    exported_types: set[str]


def _unwrap_promise(type_text: str) -> str:
    if type_text.startswith('Promise<') and type_text.endswith('>'):
        return type_text[len('Promise<') : -1].strip()
    return type_text


def parse_api_client(source: str, project_name: str) -> ApiClientSurface:
    """Collect the method signatures of the client class in ``source``."""
    client_class = f'{type_prefix(project_name)}ApiClient'
    methods = []
    for method in ts_ast.parse_class_methods(source, client_class) or []:
        param_type = None
        if method.parameters:
            param_type = method.parameters[0].type_text or 'any'
        return_type = _unwrap_promise(method.return_type) if method.return_type else 'any'
        methods.append(ClientMethod(method.name, param_type, return_type))

    return ApiClientSurface(
        client_class=client_class,
        methods=methods,
        imports=ts_ast.parse_named_imports(source),
        exported_types=set(_EXPORTED_TYPE.findall(source)),
    )


def _mock_type(method: ClientMethod) -> str:
    params = f'[{method.param_type}]' if method.param_type else '[]'
    return f'jest.Mock<Promise<{method.return_type}>, {params}>'


def render_mock_code(surface: ApiClientSurface) -> str:
    """Render ``apiClientMock.ts`` for an already parsed client surface."""
    client_class = surface.client_class
    mock_class = f'{client_class}Mock'
    method_union = f'{client_class}Method'
    factory = f'createApi{client_class[: -len("ApiClient")]}ClientMock'

    used = set()
    for method in surface.methods:
        used.update(_IDENTIFIER.findall(method.param_type or ''))
        used.update(_IDENTIFIER.findall(method.return_type))

    local = sorted((used & surface.exported_types) - {client_class})
    imported: dict[str, list[str]] = {}
    for named_import in surface.imports:
        if named_import.name in used and named_import.name not in local:
            imported.setdefault(named_import.module, [])
            if named_import.name not in imported[named_import.module]:
                imported[named_import.module].append(named_import.name)

    builder = CodeBuilder()
    builder.add_doc('Auto-generated API client mock', 'Do not edit this file directly')
    builder.add_line(
        f"import {{ {', '.join([client_class, *local])} }} from './apiClient';"
    )
    for module in sorted(imported):
        names = ', '.join(sorted(imported[module]))
        builder.add_line(f"import {{ {names} }} from '{module}';")
    builder.add_line()

    builder.add_doc(f'Names of the {client_class} methods')
    union = ' | '.join(f"'{m.name}'" for m in surface.methods)
    builder.add_line(f'export type {method_union} = {union};')
    builder.add_line()

    builder.add_doc(f'Jest mock with the same call surface as {client_class}')
    with builder.add_block(f'export class {mock_class} {{'):
        for method in surface.methods:
            builder.add_line(f'{method.name}: {_mock_type(method)} = jest.fn();')
        builder.add_line()

        builder.add_doc('Resolve every call of a method with the given value')
        with builder.add_block(
            f'mockResolve<K extends {method_union}>('
            f'method: K, value: Awaited<ReturnType<{client_class}[K]>>): this {{'
        ):
            builder.add_line('(this[method] as jest.Mock).mockResolvedValue(value);')
            builder.add_line('return this;')
        builder.add_line()

        builder.add_doc('Reject every call of a method with the given error')
        with builder.add_block(f'mockReject(method: {method_union}, error: unknown): this {{'):
            builder.add_line('(this[method] as jest.Mock).mockRejectedValue(error);')
            builder.add_line('return this;')
        builder.add_line()

        builder.add_doc('Reset calls and implementations of every method')
        with builder.add_block('reset(): void {'):
            for method in surface.methods:
                builder.add_line(f'this.{method.name}.mockReset();')
    builder.add_line()

    builder.add_doc(f'Creates a fresh {mock_class}')
    with builder.add_block(f'export function {factory}(): {mock_class} {{'):
        builder.add_line(f'return new {mock_class}();')

    return builder.get_code()


def generate_mock_code(client_source: str, project_name: str) -> str | None:
    """Generate ``apiClientMock.ts`` from the generated client source.

    Returns ``None`` when the client declares no methods.
    """
    surface = parse_api_client(client_source, project_name)
    if not surface.methods:
        return None
    return render_mock_code(surface)


def generate_api_client_mocks(
    output_dir: str | Path | UPath,
    project_name: str,
    emitter: FileEmitter | None = None,
) -> list[GeneratedArtifact]:
    """Write the mock next to the generated client and export it from the index.

    The export line is appended to ``index.ts`` only when it is missing, so
    running this twice leaves the index unchanged.

    Returns:
        The artifacts written; empty when the client has no methods.
    """
    emitter = emitter or FileEmitter(output_dir)
    logger.info(f'Generating API client mocks from {emitter.path(CLIENT_FILE)}')

    surface = parse_api_client(emitter.read_text(CLIENT_FILE), project_name)
    if not surface.methods:
        logger.warning('No endpoints found in the API client; no mock written')
        return []
    logger.info(f'Found {len(surface.methods)} endpoints to mock')

    artifacts = [
        emitter.write_text(MOCK_FILE, render_mock_code(surface), ArtifactKind.MOCK_SOURCE)
    ]

    index = emitter.read_text(INDEX_FILE) if emitter.exists(INDEX_FILE) else ''
    if MOCK_EXPORT.strip() not in index:
        if index and not index.endswith('\n'):
            index += '\n'
        artifacts.append(
            emitter.write_text(INDEX_FILE, index + MOCK_EXPORT, ArtifactKind.INDEX)
        )
    return artifacts
