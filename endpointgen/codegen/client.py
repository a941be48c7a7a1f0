"""TypeScript API client generation.

Produces ``apiClient.ts``: one parameters interface and one async method per
endpoint on a ``<Project>ApiClient`` class, plus a factory function. Every
method signs its request through the configured request helper (by default
``iamRequest`` from ``@martzmakes/constructs``).
"""

import re
from collections.abc import Mapping

from endpointgen.codegen.types import EndpointRecord, HttpMethod
from endpointgen.codegen.utils import CodeBuilder, js_string, path_parameters, type_prefix
from endpointgen.exceptions import CodeGenerationError

__all__ = [
    'DEFAULT_REQUEST_FUNCTION',
    'DEFAULT_REQUEST_MODULE',
    'generate_client_code',
]

DEFAULT_REQUEST_MODULE = '@martzmakes/constructs/lambda/iamRequest'
DEFAULT_REQUEST_FUNCTION = 'iamRequest'

_IDENTIFIER = re.compile(r'^[A-Za-z_$][\w$]*$')


def _type_ref(type_name: str | None, type_modules: Mapping[str, str] | None) -> str:
    if type_name is None:
        return 'any'
    if type_modules is None or type_name in type_modules:
        return type_name
    return 'any'


def _imports(
    records: Mapping[str, EndpointRecord], type_modules: Mapping[str, str] | None
) -> list[tuple[str, str]]:
    names = set()
    for record in records.values():
        names.update(record.referenced_types())
    imports = []
    for name in sorted(names):
        if type_modules is None:
            imports.append((name, name))
        elif name in type_modules:
            imports.append((name, type_modules[name]))
    return imports


def _params_interface(
    builder: CodeBuilder, record: EndpointRecord, input_type: str | None
) -> None:
    builder.add_doc(f'Parameters for {record.name} endpoint')
    with builder.add_block(
        f'export interface {record.params_type_name} extends BaseParams {{'
    ):
        for param in path_parameters(record.path):
            builder.add_line(f'{param}: string | number;')
        if record.input_type is not None:
            if record.method is HttpMethod.GET:
                builder.add_line(f'query?: {input_type};')
            else:
                builder.add_line(f'body: {input_type};')
    builder.add_line()


def _method(
    builder: CodeBuilder,
    record: EndpointRecord,
    output_type: str,
    request_function: str,
) -> None:
    has_body = record.method.has_body and record.input_type is not None

    doc = [f'{record.name} API method']
    if record.description:
        doc.append(record.description)
    doc += [f'@path {record.path}', f'@method {record.method.value}']
    builder.add_doc(*doc)

    with builder.add_block(
        f'async {record.name}(params: {record.params_type_name}): Promise<{output_type}> {{'
    ):
        builder.add_line(f'const path = {js_string(record.path)};')
        builder.add_line(f"const method = '{record.method.value}';")
        builder.add_line()
        builder.add_line('let finalPath = path;')
        for param in path_parameters(record.path):
            with builder.add_block(f'if (params.{param} === undefined) {{'):
                builder.add_line(
                    f"throw new Error('Missing required path parameter: {param}');"
                )
            builder.add_line(
                f"finalPath = finalPath.replace('{{{param}}}', "
                f'encodeURIComponent(String(params.{param})));'
            )
        builder.add_line()
        builder.add_line("const query = params.query || (method === 'GET' ? {} : undefined);")
        builder.add_line()

        with builder.add_block(
            f'const response = await {request_function}<{output_type}>({{', '});'
        ):
            builder.add_line('domain: process.env[this.projectName]!,')
            builder.add_line('path: finalPath,')
            builder.add_line('method,')
            builder.add_line('query,')
            if has_body:
                builder.add_line('body: JSON.stringify(params.body),')
            with builder.add_block('headers: params.headers || {', '},'):
                builder.add_line("'Content-Type': 'application/json',")
        builder.add_line()

        builder.add_line('if (')
        builder.indent()
        builder.add_lines(
            [
                'response &&',
                "typeof response === 'object' &&",
                'Object.keys(response).length === 0 &&',
                'Object.getPrototypeOf(response) === Object.prototype',
            ]
        )
        builder.dedent()
        with builder.add_block(') {'):
            builder.add_line(
                f"throw new Error('Received empty response from {request_function}');"
            )
        builder.add_line()
        builder.add_line(f'return response as {output_type};')
    builder.add_line()


def generate_client_code(
    records: Mapping[str, EndpointRecord],
    project_name: str,
    type_modules: Mapping[str, str] | None = None,
    request_module: str = DEFAULT_REQUEST_MODULE,
    request_function: str = DEFAULT_REQUEST_FUNCTION,
) -> str:
    """Generate the source of ``apiClient.ts``.

    Args:
        records: Endpoint records in declaration order.
        project_name: Used for the class names and as the default key of the
            environment variable holding the API domain.
        type_modules: Maps each resolved type name to the stem of its file
            under ``interfaces/``. Types missing from the map are typed
            ``any`` and not imported. When ``None`` every named type is
            assumed to live in ``interfaces/<TypeName>``.
        request_module: Module the signed-request helper is imported from.
        request_function: Name of the signed-request helper.

    Returns:
        The TypeScript source text.

    Raises:
        CodeGenerationError: If an endpoint or the project name cannot be
            turned into a TypeScript identifier.
    """
    for name in records:
        if not _IDENTIFIER.match(name):
            raise CodeGenerationError(
                f"Endpoint name '{name}' is not a valid method name", context='apiClient.ts'
            )
    prefix = type_prefix(project_name)
    if not prefix or prefix[0].isdigit():
        raise CodeGenerationError(
            f"Project name '{project_name}' does not yield a class name",
            context='apiClient.ts',
        )
    client_class = f'{prefix}ApiClient'

    builder = CodeBuilder()
    builder.add_doc('Auto-generated API client', 'Do not edit this file directly')
    builder.add_line(f'import {{ {request_function} }} from {js_string(request_module)};')

    imports = _imports(records, type_modules)
    if imports:
        builder.add_line()
        builder.add_line('// Import types for inputs/outputs')
        for name, module in imports:
            builder.add_line(f"import {{ {name} }} from './interfaces/{module}';")
    builder.add_line()

    builder.add_doc('Base parameters interface that all endpoint methods extend')
    with builder.add_block('interface BaseParams {'):
        builder.add_line('headers?: Record<string, string>;')
        builder.add_line('query?: Record<string, string>;')
        builder.add_line('[key: string]: any;')
    builder.add_line()

    for record in records.values():
        _params_interface(builder, record, _type_ref(record.input_type, type_modules))

    builder.add_doc('Generated API client')
    with builder.add_block(f'export class {client_class} {{'):
        builder.add_line('private projectName: string;')
        builder.add_line()
        with builder.add_block(
            f'constructor(projectName: string = {js_string(project_name)}) {{'
        ):
            builder.add_line('this.projectName = projectName;')
        builder.add_line()

        for record in records.values():
            _method(
                builder,
                record,
                _type_ref(record.output_type, type_modules),
                request_function,
            )
        # drop the blank line after the last member
        if builder.lines and builder.lines[-1] == '':
            builder.lines.pop()
    builder.add_line()

    builder.add_doc('Creates and returns a configured API client')
    with builder.add_block(
        f'export function create{client_class}('
        f'projectName: string = {js_string(project_name)}): {client_class} {{'
    ):
        builder.add_line(f'return new {client_class}(projectName);')

    return builder.get_code()
