"""Tests for contract test generation."""

import pytest
from upath import UPath

from endpointgen.codegen.contract_tests import (
    HandlerModule,
    find_handler_module,
    generate_contract_tests,
    resolve_entry,
)
from endpointgen.codegen.types import (
    ComputeBacked,
    EndpointRecord,
    HttpMethod,
    Resolved,
    StoreBacked,
    Unresolved,
)

from .fixtures import HANDLER_MODULE


def compute_record(entry, name='getToppingByName'):
    return EndpointRecord(
        name=name,
        path='toppings/{name}',
        method=HttpMethod.GET,
        backing=ComputeBacked(entry=entry),
        output_type='Topping',
    )


@pytest.fixture
def project(tmp_path):
    routes = tmp_path / 'lib' / 'routes'
    lambdas = tmp_path / 'lib' / 'lambda'
    routes.mkdir(parents=True)
    lambdas.mkdir(parents=True)
    (lambdas / 'getToppingByName.ts').write_text(HANDLER_MODULE)
    (lambdas / 'listToppings').mkdir()
    (lambdas / 'listToppings' / 'index.ts').write_text('export const apiHandler = async () => [];\n')
    return tmp_path


class TestResolveEntry:
    def test_join_with_dirname(self, project):
        record = compute_record('join(__dirname, "../lambda/getToppingByName.ts")')
        resolution = resolve_entry(record, project / 'lib' / 'routes')
        assert isinstance(resolution, Resolved)
        assert str(resolution.value) == str(project / 'lib' / 'lambda' / 'getToppingByName.ts')

    def test_path_join_without_extension(self, project):
        record = compute_record('path.join(__dirname, "../lambda", "getToppingByName")')
        resolution = resolve_entry(record, project / 'lib' / 'routes')
        assert resolution.value.name == 'getToppingByName.ts'

    def test_directory_index(self, project):
        record = compute_record('join(__dirname, "../lambda/listToppings")')
        resolution = resolve_entry(record, project / 'lib' / 'routes')
        assert str(resolution.value).endswith('listToppings/index.ts')

    def test_string_literal(self, project):
        record = compute_record('"../lambda/getToppingByName.ts"')
        resolution = resolve_entry(record, project / 'lib' / 'routes')
        assert resolution.value.name == 'getToppingByName.ts'

    @pytest.mark.parametrize(
        'entry',
        [
            None,
            'join(__dirname, "../lambda/missing.ts")',
            'join(__dirname, `../lambda/${name}.ts`)',
            'handlers.getTopping',
        ],
    )
    def test_unresolved(self, project, entry):
        resolution = resolve_entry(compute_record(entry), project / 'lib' / 'routes')
        assert isinstance(resolution, Unresolved)

    def test_store_backed(self, project):
        record = EndpointRecord(
            'getTopping', 'toppings', HttpMethod.GET, StoreBacked(table_name='t')
        )
        assert isinstance(resolve_entry(record, project), Unresolved)


class TestFindHandlerModule:
    def test_typed_handler(self, project):
        handler = UPath(project / 'lib' / 'lambda' / 'getToppingByName.ts')
        module = find_handler_module(handler, project / 'generatedClient' / 'contractTests')
        assert module == HandlerModule(
            specifier='../../lib/lambda/getToppingByName',
            handler_type_module='@martzmakes/constructs/lambda/handlers/initApiHandler',
        )

    def test_relative_handler_type_import(self, project):
        handler = project / 'lib' / 'lambda' / 'relative.ts'
        handler.write_text(
            'import { ApiHandler } from "../handlers/types";\n'
            'export const apiHandler: ApiHandler<Req, Res> = async () => ({});\n'
        )
        module = find_handler_module(UPath(handler), project / 'out' / 'contractTests')
        assert module.handler_type_module == '../../lib/handlers/types'

    def test_untyped_handler(self, project):
        handler = UPath(project / 'lib' / 'lambda' / 'listToppings' / 'index.ts')
        module = find_handler_module(handler, project / 'lib' / 'lambda')
        assert module.specifier == './listToppings/index'
        assert module.handler_type_module is None


class TestGenerateContractTests:
    def test_one_module_per_endpoint(self):
        records = {
            'getToppingByName': compute_record(None),
            'getTopping': EndpointRecord(
                'getTopping', 'toppings', HttpMethod.GET, StoreBacked(table_name='t')
            ),
        }
        tests = generate_contract_tests(records, {}, 'toppings')
        assert list(tests) == [
            'contractTests/getToppingByName.contract.test.ts',
            'contractTests/getTopping.contract.test.ts',
        ]

    def test_client_and_mock_assertions(self):
        source = generate_contract_tests(
            {'getToppingByName': compute_record(None)}, {}, 'toppings'
        )['contractTests/getToppingByName.contract.test.ts']

        assert "import { ToppingsApiClient } from '../apiClient';" in source
        assert (
            "import { ToppingsApiClientMock, createApiToppingsClientMock } from '../apiClientMock';"
            in source
        )
        assert 'export type ParamsMatch = Assert<Equals<ClientParams, MockParams>>;' in source
        assert 'export type ResultMatch = Assert<Equals<ClientResult, MockResult>>;' in source
        assert "describe('getToppingByName contract', () => {" in source
        assert 'apiHandler' not in source

    def test_handler_assertions(self):
        handler = HandlerModule(
            '../../lib/lambda/getToppingByName',
            '@martzmakes/constructs/lambda/handlers/initApiHandler',
        )
        source = generate_contract_tests(
            {'getToppingByName': compute_record(None)},
            {'getToppingByName': handler},
            'toppings',
        )['contractTests/getToppingByName.contract.test.ts']

        assert "import { apiHandler } from '../../lib/lambda/getToppingByName';" in source
        assert (
            "import { ApiHandler } from '@martzmakes/constructs/lambda/handlers/initApiHandler';"
            in source
        )
        assert (
            'export type HandlerOutputMatches = Assert<Assignable<HandlerOutput, ClientResult>>;'
            in source
        )

    def test_untyped_handler_has_no_output_assertion(self):
        source = generate_contract_tests(
            {'getToppingByName': compute_record(None)},
            {'getToppingByName': HandlerModule('../handler')},
            'toppings',
        )['contractTests/getToppingByName.contract.test.ts']

        assert "import { apiHandler } from '../handler';" in source
        assert 'HandlerOutputMatches' not in source
