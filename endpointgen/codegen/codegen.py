"""Code generation module for endpointgen.

This module provides the main Codegen class that runs one generation: load
the endpoint declarations, resolve their types, write the client and package
files, then run the optional phases (mocks, mapping templates, contract
tests).
"""

import dataclasses
import json
import logging
import os
from collections.abc import Callable
from typing import TypeVar

from upath import UPath

from endpointgen.codegen.client import generate_client_code
from endpointgen.codegen.contract_tests import (
    CONTRACT_TESTS_DIR,
    HandlerModule,
    find_handler_module,
    generate_contract_tests,
    resolve_entry,
)
from endpointgen.codegen.emitter import FileEmitter
from endpointgen.codegen.endpoints import EndpointLoader
from endpointgen.codegen.interfaces import (
    InterfaceResolver,
    default_search_roots,
    parse_declaration,
)
from endpointgen.codegen.mocks import CLIENT_FILE, MOCK_FILE, generate_api_client_mocks
from endpointgen.codegen.package import (
    GITIGNORE,
    INDEX,
    find_root_manifest,
    generate_package_json,
    generate_readme,
)
from endpointgen.codegen.types import (
    ArtifactKind,
    EndpointRecord,
    GeneratedArtifact,
    StoreBacked,
    TypeDeclaration,
    Unresolved,
)
from endpointgen.codegen.vtl import generate_templates
from endpointgen.config import CodegenConfig, RunConfig
from endpointgen.exceptions import InvalidStoreConfigError, PhaseError

__all__ = ['Codegen', 'GenerationResult']

logger = logging.getLogger(__name__)

T = TypeVar('T')

COMMON_FILE = 'common.ts'


@dataclasses.dataclass
class GenerationResult:
    """Outcome of a generation run.

    Attributes:
        output_dir: Directory the artifacts were written to.
        endpoints: The loaded endpoint records.
        artifacts: Every artifact written, in write order.
        unresolved_types: Type names no declaration was found for.
        failed_phases: Optional phases that failed; the run still succeeded.
    """

    output_dir: str
    endpoints: dict[str, EndpointRecord]
    artifacts: list[GeneratedArtifact]
    unresolved_types: list[str] = dataclasses.field(default_factory=list)
    failed_phases: list[PhaseError] = dataclasses.field(default_factory=list)

    @property
    def generated_files(self) -> list[str]:
        return [f'{self.output_dir}/{artifact.path}' for artifact in self.artifacts]


class Codegen:
    """Runs the generation pipeline for one declaration module.

    Fatal errors (unreadable declarations, invalid store configuration,
    filesystem failures) propagate. Failures of the optional phases are
    recorded on the result instead.

    Example:
        >>> from endpointgen.config import RunConfig
        >>> from endpointgen.codegen.codegen import Codegen
        >>>
        >>> run = RunConfig(project_name='toppings', endpoints_path='lib/routes/internal.ts')
        >>> result = Codegen(run).generate()
        >>> result.generated_files[0]
        'generatedClient/apiClient.ts'
    """

    def __init__(
        self,
        config: RunConfig,
        settings: CodegenConfig | None = None,
        loader: EndpointLoader | None = None,
    ):
        """Initialize the code generator.

        Args:
            config: What to generate and where.
            settings: Tool settings; defaults are used when not provided.
            loader: Optional custom endpoint loader.
        """
        self.config = config
        self.settings = settings or CodegenConfig()
        self._loader = loader or EndpointLoader()

    @property
    def declaration_path(self) -> UPath:
        return UPath(os.path.abspath(self.config.endpoints_path))

    def _search_roots(self) -> list[UPath]:
        if self.settings.search_roots is not None:
            return [UPath(root) for root in self.settings.search_roots]
        return default_search_roots(self.declaration_path)

    def generate(self) -> GenerationResult:
        records = self._loader.load(self.config.endpoints_path)

        # Nothing is written when any store configuration is invalid.
        for record in records.values():
            if isinstance(record.backing, StoreBacked):
                record.backing.validate(record.name)

        resolver = InterfaceResolver(self._search_roots(), self.settings.source_extension)
        type_files, unresolved = self._resolve_types(records, resolver)

        emitter = FileEmitter(self.config.output)
        emitter.reset()

        type_modules = self._copy_interfaces(emitter, type_files, unresolved)
        self._copy_common(emitter)

        emitter.write_text(
            CLIENT_FILE,
            generate_client_code(
                records,
                self.config.project_name,
                type_modules=type_modules,
                request_module=self.settings.request_module,
                request_function=self.settings.request_function,
            ),
            ArtifactKind.CLIENT_SOURCE,
        )
        emitter.write_text('index.ts', INDEX, ArtifactKind.INDEX)
        self._write_package_files(emitter, records)

        result = GenerationResult(
            output_dir=self.config.output,
            endpoints=records,
            artifacts=[],
            unresolved_types=unresolved,
        )
        pipeline = self.config.pipeline

        if pipeline.mocks:
            self._run_phase(
                'mocks',
                lambda: generate_api_client_mocks(
                    self.config.output, self.config.project_name, emitter
                ),
                result,
            )

        if pipeline.templates:
            self._run_phase(
                'templates',
                lambda: self._generate_templates(emitter, records, type_files),
                result,
            )

        if pipeline.contract_tests:
            if emitter.exists(MOCK_FILE):
                self._run_phase(
                    'contract-tests',
                    lambda: self._generate_contract_tests(emitter, records),
                    result,
                )
            else:
                logger.warning('Skipping contract tests: no mock client was generated')

        result.artifacts = emitter.artifacts
        logger.info(f'API client generated successfully in {self.config.output}')
        return result

    def _run_phase(
        self, phase: str, action: Callable[[], T], result: GenerationResult
    ) -> T | None:
        try:
            return action()
        except InvalidStoreConfigError:
            raise
        except Exception as e:
            error = PhaseError(phase, e)
            logger.error(str(error))
            result.failed_phases.append(error)
            return None

    def _resolve_types(
        self, records: dict[str, EndpointRecord], resolver: InterfaceResolver
    ) -> tuple[dict[str, UPath], list[str]]:
        type_files: dict[str, UPath] = {}
        unresolved: list[str] = []
        for record in records.values():
            for type_name in record.referenced_types():
                if type_name in type_files or type_name in unresolved:
                    continue
                resolution = resolver.resolve(type_name)
                if isinstance(resolution, Unresolved):
                    unresolved.append(type_name)
                else:
                    type_files[type_name] = resolution.value
        return type_files, unresolved

    def _copy_interfaces(
        self,
        emitter: FileEmitter,
        type_files: dict[str, UPath],
        unresolved: list[str],
    ) -> dict[str, str]:
        """Copy declaration files to ``interfaces/``; returns type name -> module stem."""
        copied: dict[str, str] = {}
        type_modules: dict[str, str] = {}
        for type_name, path in list(type_files.items()):
            source = str(path)
            if path.name in copied and copied[path.name] != source:
                logger.warning(
                    f'Skipping {source} for {type_name}: interfaces/{path.name} '
                    f'already holds {copied[path.name]}'
                )
                del type_files[type_name]
                unresolved.append(type_name)
                continue
            if path.name not in copied:
                emitter.copy(path, f'interfaces/{path.name}', ArtifactKind.INTERFACE)
                copied[path.name] = source
            type_modules[type_name] = path.name.removesuffix(self.settings.source_extension)
        return type_modules

    def _copy_common(self, emitter: FileEmitter) -> None:
        common = self.declaration_path.parent / COMMON_FILE
        if common.is_file():
            emitter.copy(common, COMMON_FILE, ArtifactKind.INTERFACE)

    def _write_package_files(
        self, emitter: FileEmitter, records: dict[str, EndpointRecord]
    ) -> None:
        manifest = generate_package_json(
            self.config.project_name,
            self.settings.request_module,
            package_scope=self.settings.package_scope,
            root_manifest=find_root_manifest(),
        )
        emitter.write_text('package.json', manifest, ArtifactKind.MANIFEST)

        package_name = json.loads(manifest)['name']
        emitter.write_text(
            'README.md',
            generate_readme(
                self.config.project_name,
                package_name,
                records,
                has_mocks=self.config.pipeline.mocks,
            ),
            ArtifactKind.README,
        )
        emitter.write_text('.gitignore', GITIGNORE, ArtifactKind.IGNORE_FILE)

    def _generate_templates(
        self,
        emitter: FileEmitter,
        records: dict[str, EndpointRecord],
        type_files: dict[str, UPath],
    ) -> list[GeneratedArtifact]:
        declarations: dict[str, TypeDeclaration] = {}
        for record in records.values():
            if not record.is_store_backed or not record.output_type:
                continue
            path = type_files.get(record.output_type)
            if path is None or record.output_type in declarations:
                continue
            declaration = parse_declaration(path, record.output_type)
            if declaration is not None:
                declarations[record.output_type] = declaration

        return generate_templates(
            records,
            declarations,
            self.config.output,
            emitter=emitter,
            default_limit=self.settings.default_limit,
            extension=self.settings.template_extension,
        )

    def _generate_contract_tests(
        self, emitter: FileEmitter, records: dict[str, EndpointRecord]
    ) -> list[GeneratedArtifact]:
        tests_dir = UPath(os.path.abspath(self.config.output)) / CONTRACT_TESTS_DIR
        handler_modules: dict[str, HandlerModule] = {}
        for record in records.values():
            if record.is_store_backed:
                continue
            resolution = resolve_entry(record, self.declaration_path.parent)
            if isinstance(resolution, Unresolved):
                logger.info(f"Handler of '{record.name}' not resolved: {resolution.reason}")
                continue
            handler_modules[record.name] = find_handler_module(resolution.value, tests_dir)

        tests = generate_contract_tests(records, handler_modules, self.config.project_name)
        return [
            emitter.write_text(path, source, ArtifactKind.CONTRACT_TEST)
            for path, source in tests.items()
        ]
