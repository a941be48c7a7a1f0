"""endpointgen - Generate typed TypeScript API clients from endpoint declarations.

endpointgen reads a TypeScript module exporting an ``endpoints`` map and
generates a typed client, a jest mock with the same call surface, contract
tests tying them together and, for endpoints served straight from DynamoDB,
the gateway mapping templates.

Quick Start:
    >>> from endpointgen import Codegen, RunConfig
    >>>
    >>> run = RunConfig(
    ...     project_name="toppings",
    ...     endpoints_path="lib/routes/internal.ts",
    ... )
    >>> Codegen(run).generate()

CLI Usage:
    $ endpointgen generate toppings lib/routes/internal.ts
    $ endpointgen generate toppings lib/routes/internal.ts ./client --no-vtl
"""

from importlib.metadata import PackageNotFoundError, version

from endpointgen.codegen.codegen import Codegen, GenerationResult
from endpointgen.codegen.endpoints import EndpointLoader
from endpointgen.codegen.interfaces import InterfaceResolver
from endpointgen.config import CodegenConfig, PipelineConfig, RunConfig, get_config
from endpointgen.exceptions import (
    CodeGenerationError,
    ConfigurationError,
    DeclarationLoadError,
    EndpointGenError,
    InvalidStoreConfigError,
    OutputError,
    PhaseError,
)

__all__ = [
    # Main classes
    'Codegen',
    'GenerationResult',
    'EndpointLoader',
    'InterfaceResolver',
    # Configuration
    'CodegenConfig',
    'PipelineConfig',
    'RunConfig',
    'get_config',
    # Exceptions
    'EndpointGenError',
    'DeclarationLoadError',
    'InvalidStoreConfigError',
    'CodeGenerationError',
    'ConfigurationError',
    'OutputError',
    'PhaseError',
]

try:
    __version__ = version('endpointgen')
except PackageNotFoundError:
    __version__ = 'unknown'
