"""Package files of the generated client: manifest, README, index and ignore file."""

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from upath import UPath

from endpointgen.codegen.types import EndpointRecord, HttpMethod
from endpointgen.codegen.utils import path_parameters, title_case, type_prefix

__all__ = [
    'GITIGNORE',
    'INDEX',
    'find_root_manifest',
    'generate_package_json',
    'generate_readme',
    'request_package',
]

logger = logging.getLogger(__name__)

INDEX = "export * from './apiClient';\n"
GITIGNORE = '*.ts\n*.js\n'


def request_package(request_module: str) -> str:
    """npm package providing ``request_module``, e.g. ``@scope/pkg/lib/x`` -> ``@scope/pkg``."""
    parts = request_module.split('/')
    if request_module.startswith('@'):
        return '/'.join(parts[:2])
    return parts[0]


def find_root_manifest(cwd: str | Path | None = None) -> dict[str, Any] | None:
    """Read the nearest ``package.json`` walking up from ``cwd``.

    When ``cwd`` is inside ``node_modules`` the search starts above it.
    """
    directory = UPath(cwd if cwd is not None else os.getcwd()).absolute()
    if 'node_modules' in directory.parts:
        for _ in directory.parts[directory.parts.index('node_modules'):]:
            directory = directory.parent

    while True:
        manifest = directory / 'package.json'
        if manifest.is_file():
            try:
                return json.loads(manifest.read_text(encoding='utf-8'))
            except (OSError, ValueError) as e:
                logger.warning(f'Could not read {manifest}: {e}')
                return None
        if directory.parent == directory:
            return None
        directory = directory.parent


def generate_package_json(
    project_name: str,
    request_module: str,
    package_scope: str | None = None,
    root_manifest: Mapping[str, Any] | None = None,
) -> str:
    """Generate a minimal ``package.json`` for the client package.

    Args:
        project_name: Name of the API project.
        request_module: Module of the request helper; its package becomes the
            only dependency.
        package_scope: Scope (``@org``) prefixed to unscoped package names.
        root_manifest: The invoking project's manifest, if one was found.
    """
    helper = request_package(request_module)
    scope = f'{package_scope.rstrip("/")}/' if package_scope else ''

    if root_manifest is None or not isinstance(root_manifest.get('name'), str):
        logger.warning('No root package.json found; using a fallback package name')
        manifest = {
            'name': f'{scope}{project_name}-client',
            'version': '1.0.0',
            'description': f'API client for {project_name}',
            'main': 'index.js',
            'types': 'index.d.ts',
            'dependencies': {helper: 'latest'},
        }
        return json.dumps(manifest, indent=2) + '\n'

    name = root_manifest['name']
    if not name.startswith('@'):
        name = f'{scope}{name}'
    dependencies = root_manifest.get('dependencies') or {}

    manifest = {
        'name': name,
        'version': root_manifest.get('version') or '1.0.0',
        'description': f'API client for {project_name}',
        'main': 'index.js',
        'types': 'index.d.ts',
        'dependencies': {helper: dependencies.get(helper, 'latest')},
    }
    if 'typescript' in dependencies:
        manifest['peerDependencies'] = {'typescript': dependencies['typescript']}
    return json.dumps(manifest, indent=2) + '\n'


def _endpoint_sample(record: EndpointRecord) -> str:
    fields = [f"  {param}: 'sample-{param}'" for param in path_parameters(record.path)]
    if record.input_type is not None:
        if record.method is HttpMethod.GET:
            fields.append('  query: {\n    // Your query parameters here\n  }')
        else:
            fields.append('  body: {\n    // Your request body here\n  }')
    params = ',\n'.join(fields)
    return (
        f'// Example for {record.name} endpoint\n'
        f'const {record.name}Response = await client.{record.name}({{\n'
        f'{params}\n'
        '});'
    )


def _endpoint_docs(record: EndpointRecord) -> str:
    lines = [
        f'### `{record.name}`',
        '',
        f'- **Path**: `{record.path}`',
        f'- **HTTP Method**: {record.method.value}',
        f'- **Input Type**: {f"`{record.input_type}`" if record.input_type else "None"}',
        f'- **Output Type**: {f"`{record.output_type}`" if record.output_type else "None"}',
    ]
    if record.description:
        lines.append(f'- **Description**: {record.description}')
    lines += [
        '',
        '#### Usage Example:',
        '```typescript',
        _endpoint_sample(record),
        '```',
    ]
    return '\n'.join(lines)


def generate_readme(
    project_name: str,
    package_name: str,
    records: Mapping[str, EndpointRecord],
    has_mocks: bool = True,
) -> str:
    """Generate the ``README.md`` of the client package."""
    display_name = title_case(project_name)
    prefix = type_prefix(project_name)
    count = len(records)

    sections = [
        f'# {display_name} API Client',
        '',
        '## Overview',
        f'This package provides a TypeScript client for the {display_name} API. '
        'It was automatically generated and includes TypeScript types for request '
        'and response objects.',
        '',
        '## Installation',
        '',
        '```bash',
        f'npm install --save {package_name}',
        '```',
        '',
        '## Usage',
        '',
        '### Importing the client',
        '',
        '```typescript',
        f"import {{ {prefix}ApiClient, create{prefix}ApiClient }} from '{package_name}';",
        '',
        '// Initialize the client using the factory function',
        f'const client = create{prefix}ApiClient();',
        '',
        '// Or create an instance directly',
        f'const clientInstance = new {prefix}ApiClient();',
        '```',
        '',
        '### Making API calls',
        f'This client includes {count} endpoint{"" if count == 1 else "s"} with full '
        'TypeScript type safety.',
        '',
        '## API Endpoints',
        '',
    ]
    for record in records.values():
        sections += [_endpoint_docs(record), '']

    if has_mocks:
        first = next(iter(records), 'someEndpoint')
        sections += [
            '## Testing',
            '',
            '### Using the mock client',
            'This package includes a mock client with the same call surface as the real client:',
            '',
            '```typescript',
            f"import {{ createApi{prefix}ClientMock }} from '{package_name}';",
            '',
            f'const mockClient = createApi{prefix}ClientMock();',
            '',
            '// Configure mock responses for specific endpoints',
            f"mockClient.mockResolve('{first}', {{",
            '  // Your mocked response data',
            '});',
            '',
            '// Or configure to reject with an error',
            f"mockClient.mockReject('{first}', new Error('Mock error'));",
            '```',
            '',
            '### Contract Tests',
            'The `contractTests` directory verifies that the client and the mock '
            'expose the same parameter and return types for every endpoint.',
            '',
        ]

    sections += [
        '## Generated Code',
        'This client was automatically generated from API definitions. Please do not '
        'modify the generated files directly as changes will be overwritten when the '
        'client is regenerated.',
    ]
    return '\n'.join(sections) + '\n'
