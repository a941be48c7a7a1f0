"""Tests for API client generation."""

import pytest

from endpointgen.codegen.client import generate_client_code
from endpointgen.codegen.endpoints import EndpointLoader
from endpointgen.codegen.types import ComputeBacked, EndpointRecord, HttpMethod
from endpointgen.exceptions import CodeGenerationError

from .fixtures import COMPUTE_ENDPOINTS


@pytest.fixture
def records():
    return EndpointLoader().parse_structural(COMPUTE_ENDPOINTS).value


@pytest.fixture
def code(records):
    return generate_client_code(records, 'toppings')


class TestClientCode:
    def test_header_and_imports(self, code):
        lines = code.splitlines()
        assert "import { iamRequest } from '@martzmakes/constructs/lambda/iamRequest';" in lines
        assert "import { CreateToppingRequest } from './interfaces/CreateToppingRequest';" in lines
        assert "import { Topping } from './interfaces/Topping';" in lines

    def test_params_interfaces(self, code):
        assert 'export interface GetToppingByNameParams extends BaseParams {\n  name: string | number;\n}' in code
        assert 'export interface CreateToppingParams extends BaseParams {\n  body: CreateToppingRequest;\n}' in code
        assert 'export interface DeleteToppingParams extends BaseParams {\n  name: string | number;\n}' in code

    def test_class_and_factory(self, code):
        assert 'export class ToppingsApiClient {' in code
        assert "constructor(projectName: string = 'toppings') {" in code
        assert (
            "export function createToppingsApiClient(projectName: string = 'toppings'): "
            'ToppingsApiClient {'
        ) in code
        assert code.endswith('}\n')
        assert not code.endswith('\n\n')

    def test_methods_in_declaration_order(self, code):
        positions = [
            code.index('async getToppingByName('),
            code.index('async createTopping('),
            code.index('async deleteTopping('),
        ]
        assert positions == sorted(positions)

    def test_method_signatures(self, code):
        assert 'async getToppingByName(params: GetToppingByNameParams): Promise<Topping> {' in code
        assert 'async deleteTopping(params: DeleteToppingParams): Promise<any> {' in code

    def test_path_parameters(self, code):
        assert "throw new Error('Missing required path parameter: name');" in code
        assert (
            "finalPath = finalPath.replace('{name}', encodeURIComponent(String(params.name)));"
            in code
        )

    def test_request_call(self, code):
        assert 'const response = await iamRequest<Topping>({' in code
        assert 'domain: process.env[this.projectName]!,' in code
        assert "const query = params.query || (method === 'GET' ? {} : undefined);" in code
        assert code.count('body: JSON.stringify(params.body),') == 1

    def test_description_in_doc_comment(self, code):
        assert '   * Fetch a single topping\n' in code
        assert '   * @path toppings/{name}\n' in code


class TestTypeModules:
    def test_unresolved_types_become_any(self, records):
        code = generate_client_code(records, 'toppings', type_modules={'Topping': 'Topping'})
        assert "import { Topping } from './interfaces/Topping';" in code
        assert 'CreateToppingRequest' not in code
        assert 'body: any;' in code

    def test_module_stem(self, records):
        code = generate_client_code(records, 'toppings', type_modules={'Topping': 'pizza'})
        assert "import { Topping } from './interfaces/pizza';" in code

    def test_custom_request_helper(self, records):
        code = generate_client_code(
            records,
            'toppings',
            request_module='@acme/http/signed',
            request_function='signedRequest',
        )
        assert "import { signedRequest } from '@acme/http/signed';" in code
        assert 'await signedRequest<Topping>({' in code


def test_get_with_input_uses_query():
    record = EndpointRecord(
        name='searchToppings',
        path='toppings',
        method=HttpMethod.GET,
        backing=ComputeBacked(),
        input_type='ToppingFilter',
        output_type='ToppingList',
    )
    code = generate_client_code({'searchToppings': record}, 'toppings')
    assert 'query?: ToppingFilter;' in code
    assert 'JSON.stringify' not in code


def test_project_name_with_dash():
    record = EndpointRecord('ping', 'ping', HttpMethod.GET, ComputeBacked())
    code = generate_client_code({'ping': record}, 'published-api')
    assert 'export class PublishedapiApiClient {' in code
    assert "constructor(projectName: string = 'published-api') {" in code


def test_invalid_endpoint_name():
    record = EndpointRecord('get-thing', 'thing', HttpMethod.GET, ComputeBacked())
    with pytest.raises(CodeGenerationError) as exc_info:
        generate_client_code({'get-thing': record}, 'toppings')
    assert exc_info.value.context == 'apiClient.ts'


@pytest.mark.parametrize(
    'method,expected',
    [
        (HttpMethod.GET, False),
        (HttpMethod.POST, True),
        (HttpMethod.PUT, True),
        (HttpMethod.DELETE, True),
    ],
)
def test_method_has_body(method, expected):
    assert method.has_body is expected


def test_delete_with_input_sends_body():
    record = EndpointRecord(
        name='removeToppings',
        path='toppings',
        method=HttpMethod.DELETE,
        backing=ComputeBacked(),
        input_type='ToppingFilter',
        output_type=None,
    )
    code = generate_client_code({'removeToppings': record}, 'toppings')
    assert 'body: JSON.stringify(params.body),' in code
