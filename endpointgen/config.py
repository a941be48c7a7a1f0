import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from endpointgen.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['endpointgen.yaml', 'endpointgen.yml']


class PipelineConfig(BaseModel):
    """Which optional phases of a run are enabled."""

    mocks: bool = Field(True, description='Generate apiClientMock.ts.')

    templates: bool = Field(
        True, description='Generate mapping templates for store-backed endpoints.'
    )

    contract_tests: bool = Field(
        True, description='Generate contract tests (requires the mock).'
    )


class RunConfig(BaseModel):
    """Represents a single generation run."""

    project_name: str = Field(
        ...,
        min_length=1,
        description='Project name; names the client classes and the domain env var.',
    )

    endpoints_path: str = Field(
        ..., min_length=1, description='Path to the endpoint declaration module.'
    )

    output: str = Field(
        'generatedClient', description='Output directory for the generated client.'
    )

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='ENDPOINTGEN_', extra='forbid')

    search_roots: list[str] | None = Field(
        None,
        description='Directories searched for type declarations; derived from '
        'the declaration module when unset.',
    )

    request_module: str = Field(
        '@martzmakes/constructs/lambda/iamRequest',
        description='Module the signed-request helper is imported from.',
    )

    request_function: str = Field(
        'iamRequest', description='Name of the signed-request helper.'
    )

    package_scope: str | None = Field(
        None, description='Scope prefixed to unscoped client package names.'
    )

    default_limit: int = Field(
        25, gt=0, description='Page size of Query templates without a defaultLimit.'
    )

    log_level: str = Field('INFO', description='Logging level of the CLI.')

    source_extension: str = Field('.ts', description='Extension of source files.')

    template_extension: str = Field(
        '.vtl', description='Extension of generated mapping templates.'
    )


def load_yaml(path: str | Path) -> dict:
    import yaml

    try:
        data = yaml.load(Path(path).read_text(), Loader=yaml.FullLoader)
    except OSError as e:
        raise ConfigurationError(f'Could not read configuration: {e}', str(path))
    except yaml.YAMLError as e:
        raise ConfigurationError(f'Invalid YAML: {e}', str(path))

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError('Configuration must be a mapping', str(path))
    return data


def _validate(data: dict, path: str | Path) -> CodegenConfig:
    try:
        return CodegenConfig.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        field = '.'.join(str(part) for part in error['loc']) or None
        raise ConfigurationError(error['msg'], str(path), field)


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file or return default config.

    Looks at, in order: the explicit ``path``, ``endpointgen.yaml`` /
    ``endpointgen.yml`` in the current directory, ``[tool.endpointgen]`` in
    ``pyproject.toml``. Without any of them, settings come from
    ``ENDPOINTGEN_*`` environment variables and the defaults.
    """
    if path:
        return _validate(load_yaml(path), path)

    cwd = os.getcwd()

    for filename in DEFAULT_FILENAMES:
        path = Path(cwd) / filename
        if path.exists():
            return _validate(load_yaml(path), path)

    path = Path(cwd) / 'pyproject.toml'

    if path.exists():
        import tomllib

        try:
            pyproject = tomllib.loads(path.read_text())
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f'Invalid TOML: {e}', str(path))
        tools = pyproject.get('tool', {})

        if 'endpointgen' in tools:
            return _validate(tools['endpointgen'], path)

    return CodegenConfig()
