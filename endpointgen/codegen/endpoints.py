"""Endpoint declaration loading.

Declarations are TypeScript modules exporting an ``endpoints`` object literal::

    export const endpoints: ApiClientDefinition<{
      getTopping: ApiEndpoint<"GET", never, Topping>;
    }> = {
      getTopping: {
        path: "toppings/{name}",
        method: "GET",
        entry: join(__dirname, "../lambda/getTopping.ts"),
        lambdaGenerator: (resources) => ({}),
      },
    };

Loading happens in two tiers. The structural pass parses the initializer with
:mod:`endpointgen.codegen.ts_ast`. When it yields nothing, a textual fallback
scans the whole module with regular expressions. The input and output type
names always come from the ``ApiEndpoint<...>`` type arguments unless the
descriptor carries string-literal ``input``/``output`` fields.
"""

import dataclasses
import json
import logging
import re
from pathlib import Path
from typing import Any

from upath import UPath

from endpointgen.codegen import ts_ast
from endpointgen.codegen.types import (
    NO_TYPE_NAMES,
    ComputeBacked,
    EndpointRecord,
    HttpMethod,
    Resolution,
    Resolved,
    StoreAction,
    StoreBacked,
    Unresolved,
)
from endpointgen.exceptions import DeclarationLoadError, InvalidStoreConfigError

__all__ = ['EndpointLoader', 'TypeArguments', 'find_type_arguments']

logger = logging.getLogger(__name__)

DECLARATION_VARIABLE = 'endpoints'

_TYPE_ARGUMENTS = re.compile(
    r'\b(\w+)\s*\??\s*:\s*ApiEndpoint\s*<\s*["\']([A-Za-z]+)["\']'
    r'(?:\s*,\s*(\w+)(?=\s*[,>])(?:\s*,\s*(\w+)(?=\s*[,>]))?)?'
)
_PATH_FIELD = re.compile(r'\bpath\s*:\s*(["\'`])(.*?)\1', re.DOTALL)
_METHOD_FIELD = re.compile(r'\bmethod\s*:\s*(["\'`])([A-Za-z]+)\1')

# Descriptor fields of the store-backed variant, mapped to StoreBacked fields.
_STORE_TEXT_FIELDS = {
    'tableName': 'table_name',
    'pk': 'partition_key',
    'sk': 'sort_key',
    'indexName': 'index_name',
    'keyConditionExpression': 'key_condition_expression',
    'filterExpression': 'filter_expression',
    'responseKey': 'response_key',
    'requestTemplateOverride': 'request_template_override',
    'responseTemplateOverride': 'response_template_override',
}
_STORE_MAP_FIELDS = {
    'expressionAttributeNames': 'expression_attribute_names',
    'expressionAttributeValues': 'expression_attribute_values',
}


@dataclasses.dataclass(frozen=True)
class TypeArguments:
    """Type arguments of ``ApiEndpoint<"METHOD", Input, Output>``."""

    method: str
    input_type: str | None = None
    output_type: str | None = None


def _type_name(value: Any) -> str | None:
    """Normalize a type name, mapping ``never``/``any``/... to ``None``."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value in NO_TYPE_NAMES:
        return None
    return value


def find_type_arguments(source: str) -> dict[str, TypeArguments]:
    """Collect ``name: ApiEndpoint<"METHOD", Input, Output>`` entries.

    Whitespace and newlines between the type arguments are tolerated. The
    first occurrence of a name wins.
    """
    found: dict[str, TypeArguments] = {}
    for match in _TYPE_ARGUMENTS.finditer(source):
        name, method, input_type, output_type = match.groups()
        if name in found:
            continue
        found[name] = TypeArguments(
            method.upper(), _type_name(input_type), _type_name(output_type)
        )
    return found


class EndpointLoader:
    """Loads endpoint records from a declaration module.

    Example:
        >>> loader = EndpointLoader()
        >>> records = loader.load('lib/routes/internal.ts')
        >>> list(records)
        ['getToppingByName', 'getToppings', 'searchToppings']
    """

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

    def load(self, path: str | Path | UPath) -> dict[str, EndpointRecord]:
        """Load the endpoints declared in ``path``, in source order.

        Raises:
            DeclarationLoadError: If the module cannot be read or declares no
                usable endpoint.
            InvalidStoreConfigError: If a store-backed descriptor uses a
                non-literal value where a literal is required.
        """
        path = UPath(path)
        try:
            source = path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise DeclarationLoadError(str(path), 'could not read module', e)

        resolution = self.parse_structural(source, str(path))
        if isinstance(resolution, Unresolved):
            logger.debug(
                f'Structural pass found no endpoints in {path} ({resolution.reason}); '
                'trying textual extraction'
            )
            resolution = self.parse_textual(source, str(path))

        if isinstance(resolution, Unresolved):
            raise DeclarationLoadError(str(path), resolution.reason)

        logger.info(f'Loaded {len(resolution.value)} endpoint(s) from {path}')
        return resolution.value

    def parse_structural(
        self, source: str, source_name: str = '<string>'
    ) -> Resolution[dict[str, EndpointRecord]]:
        """Read the ``endpoints`` object literal."""
        if not ts_ast.has_variable(source, DECLARATION_VARIABLE):
            return Unresolved(f"no '{DECLARATION_VARIABLE}' variable declared")

        initializer = ts_ast.find_variable_initializer(source, DECLARATION_VARIABLE)
        if not isinstance(initializer, dict):
            return Unresolved(
                f"'{DECLARATION_VARIABLE}' is not initialized with an object literal"
            )

        type_arguments = find_type_arguments(source)
        records: dict[str, EndpointRecord] = {}
        for name, descriptor in initializer.items():
            if not isinstance(descriptor, dict):
                logger.warning(
                    f"Skipping endpoint '{name}': descriptor is not an object literal"
                )
                continue
            records[name] = self._build_record(
                name, descriptor, type_arguments.get(name), source_name
            )

        if not records:
            return Unresolved('no endpoint descriptors found')
        return Resolved(records)

    def parse_textual(
        self, source: str, source_name: str = '<string>'
    ) -> Resolution[dict[str, EndpointRecord]]:
        """Extract endpoints from the raw text when the literal cannot be parsed.

        Only the name, path, method and type arguments are recovered; every
        record is treated as compute-backed with an unknown entry. Endpoints
        whose descriptor or path cannot be recovered are skipped.
        """
        records: dict[str, EndpointRecord] = {}
        for name, arguments in find_type_arguments(source).items():
            block = re.search(rf'\b{re.escape(name)}\s*:\s*\{{([^}}]+)\}}', source)
            if block is None:
                logger.warning(
                    f"Skipping endpoint '{name}' in {source_name}: no descriptor block found"
                )
                continue
            path = _PATH_FIELD.search(block.group(1))
            if path is None:
                logger.warning(
                    f"Skipping endpoint '{name}' in {source_name}: no literal path"
                )
                continue
            method = _METHOD_FIELD.search(block.group(1))
            records[name] = EndpointRecord(
                name=name,
                path=path.group(2),
                method=self._method(
                    name, method.group(2) if method else arguments.method, source_name
                ),
                backing=ComputeBacked(),
                input_type=arguments.input_type,
                output_type=arguments.output_type,
            )

        if not records:
            return Unresolved('no endpoint declarations found')
        return Resolved(records)

    def _build_record(
        self,
        name: str,
        descriptor: dict[str, Any],
        arguments: TypeArguments | None,
        source_name: str,
    ) -> EndpointRecord:
        path = descriptor.get('path')
        if not isinstance(path, str):
            raise DeclarationLoadError(
                source_name, f"endpoint '{name}' has no literal path"
            )

        method = descriptor.get('method')
        if not isinstance(method, str):
            method = arguments.method if arguments else None
        if method is None:
            raise DeclarationLoadError(
                source_name, f"endpoint '{name}' declares no method"
            )

        input_type = _type_name(descriptor.get('input'))
        if input_type is None and arguments:
            input_type = arguments.input_type
        output_type = _type_name(descriptor.get('output'))
        if output_type is None and arguments:
            output_type = arguments.output_type

        description = descriptor.get('description')
        return EndpointRecord(
            name=name,
            path=path,
            method=self._method(name, method, source_name),
            backing=self._backing(name, descriptor),
            input_type=input_type,
            output_type=output_type,
            description=description if isinstance(description, str) else None,
        )

    @staticmethod
    def _method(name: str, value: str, source_name: str) -> HttpMethod:
        try:
            return HttpMethod(value.upper())
        except ValueError:
            raise DeclarationLoadError(
                source_name, f"endpoint '{name}' uses unsupported method '{value}'"
            ) from None

    def _backing(self, name: str, descriptor: dict[str, Any]) -> ComputeBacked | StoreBacked:
        if 'dynamoGenerator' in descriptor:
            return self._store_backing(name, descriptor)

        if 'entry' not in descriptor and 'lambdaGenerator' not in descriptor:
            logger.warning(
                f"Endpoint '{name}' declares neither an entry nor a dynamoGenerator"
            )

        entry = descriptor.get('entry')
        binding = descriptor.get('lambdaGenerator')
        return ComputeBacked(
            entry=_source_text(entry),
            queue=descriptor.get('queue') is True,
            resource_binding=_source_text(binding),
        )

    def _store_backing(self, name: str, descriptor: dict[str, Any]) -> StoreBacked:
        generator = descriptor['dynamoGenerator']
        fields: dict[str, Any] = {}
        if isinstance(generator, ts_ast.ArrowFunction) and isinstance(generator.body, dict):
            fields.update(generator.body)
        elif isinstance(generator, dict):
            fields.update(generator)
        else:
            logger.warning(
                f"Endpoint '{name}': dynamoGenerator does not return an object "
                'literal; only fields declared on the descriptor are used'
            )
        # fields on the descriptor itself win over the generated ones
        for key in (*_STORE_TEXT_FIELDS, *_STORE_MAP_FIELDS, 'action', 'defaultLimit',
                    'responseTemplateDisableItemNotFoundHandler'):
            if key in descriptor:
                fields[key] = descriptor[key]

        values: dict[str, Any] = {}
        for key, attribute in _STORE_TEXT_FIELDS.items():
            value = fields.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise InvalidStoreConfigError(name, f'{key} must be a string literal')
            values[attribute] = value

        for key, attribute in _STORE_MAP_FIELDS.items():
            value = fields.get(key)
            if value is None:
                continue
            if not isinstance(value, dict) or not _is_plain(value):
                raise InvalidStoreConfigError(
                    name, f'{key} must be an object literal of literal values'
                )
            values[attribute] = value

        action = fields.get('action')
        if action is not None:
            try:
                values['action'] = StoreAction(action)
            except ValueError:
                raise InvalidStoreConfigError(
                    name, f"unsupported action {action!r}; expected GetItem or Query"
                ) from None

        limit = fields.get('defaultLimit')
        if limit is not None:
            if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
                raise InvalidStoreConfigError(
                    name, 'defaultLimit must be a positive integer literal'
                )
            values['default_limit'] = limit

        values['disable_item_not_found'] = (
            fields.get('responseTemplateDisableItemNotFoundHandler') is True
        )
        return StoreBacked(table_name=values.pop('table_name', None), **values)


def _source_text(value: Any) -> str | None:
    """Source text of a parsed descriptor value."""
    if value is None:
        return None
    if isinstance(value, ts_ast.ArrowFunction | ts_ast.Opaque):
        return value.text
    if isinstance(value, str):
        return json.dumps(value)
    return json.dumps(value) if _is_plain(value) else str(value)


def _is_plain(value: Any) -> bool:
    """Whether ``value`` only holds JSON-compatible literals."""
    if isinstance(value, dict):
        return all(isinstance(k, str) and _is_plain(v) for k, v in value.items())
    if isinstance(value, list):
        return all(_is_plain(item) for item in value)
    return value is None or isinstance(value, str | int | float | bool)
