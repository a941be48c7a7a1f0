"""Code generation module for endpointgen.

This module turns a TypeScript endpoint declaration module into a typed API
client package.

Main Components:
    - Codegen: The orchestrator of a generation run
    - EndpointLoader: Reads endpoint records from the declaration module
    - InterfaceResolver: Finds the files declaring input and output types
    - TemplateGenerator: Builds mapping templates for store-backed endpoints
    - FileEmitter: Writes the generated artifacts

Example:
    >>> from endpointgen.codegen import Codegen
    >>> from endpointgen.config import RunConfig
    >>>
    >>> run = RunConfig(project_name='toppings', endpoints_path='lib/routes/internal.ts')
    >>> Codegen(run).generate()
"""

from endpointgen.codegen.client import generate_client_code
from endpointgen.codegen.codegen import Codegen, GenerationResult
from endpointgen.codegen.contract_tests import generate_contract_tests, resolve_entry
from endpointgen.codegen.emitter import FileEmitter
from endpointgen.codegen.endpoints import EndpointLoader
from endpointgen.codegen.interfaces import (
    InterfaceResolver,
    classify_type,
    parse_declaration,
)
from endpointgen.codegen.mocks import (
    generate_api_client_mocks,
    generate_mock_code,
    parse_api_client,
)
from endpointgen.codegen.types import (
    ComputeBacked,
    EndpointRecord,
    HttpMethod,
    StoreAction,
    StoreBacked,
)
from endpointgen.codegen.vtl import TemplateGenerator, generate_templates

__all__ = [
    'Codegen',
    'ComputeBacked',
    'EndpointLoader',
    'EndpointRecord',
    'FileEmitter',
    'GenerationResult',
    'HttpMethod',
    'InterfaceResolver',
    'StoreAction',
    'StoreBacked',
    'TemplateGenerator',
    'classify_type',
    'generate_api_client_mocks',
    'generate_client_code',
    'generate_contract_tests',
    'generate_mock_code',
    'generate_templates',
    'parse_api_client',
    'parse_declaration',
    'resolve_entry',
]
