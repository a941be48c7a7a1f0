"""Mapping templates for store-backed endpoints.

A store-backed endpoint is served by the gateway talking to DynamoDB directly,
without a compute function in between. The gateway needs two Velocity (VTL)
templates per endpoint: one turning the HTTP request into a ``GetItem`` or
``Query`` call, and one turning the marshalled DynamoDB result back into
plain JSON.

Response templates are field-aware when the output type could be read: every
non-key property is emitted through an ``$outputConditional<Kind>`` macro
that skips absent attributes, and key attributes (``pk``, ``sk``, ``gsi*``)
are emitted unconditionally after them. When the output type is unknown both
templates fall back to a pass-through of the store result.
"""

import dataclasses
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import assert_never

from upath import UPath

from endpointgen.codegen.emitter import FileEmitter
from endpointgen.codegen.types import (
    ArtifactKind,
    EndpointRecord,
    GeneratedArtifact,
    Property,
    PropertyKind,
    StoreAction,
    StoreBacked,
    TypeDeclaration,
)

__all__ = [
    'DEFAULT_LIMIT',
    'GENERIC_REQUEST_TEMPLATE',
    'GENERIC_RESPONSE_TEMPLATE',
    'TemplateGenerator',
    'TemplatePair',
    'generate_templates',
]

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 25

# Pass the request body through unchanged.
GENERIC_REQUEST_TEMPLATE = "$input.json('$')"

# Return the store result unchanged, as JSON.
GENERIC_RESPONSE_TEMPLATE = (
    '#set($context.responseOverride.header.Content-Type = "application/json")\n'
    "$input.json('$')"
)

RESPONSE_HEADER = '\n'.join(
    [
        "#set($inputRoot = $input.path('$'))",
        '#set($context.responseOverride.header.Content-Type = "application/json")',
        '#set($comma = ",")',
        '#define($outputConditionalString)#if("$!obj[$key].S" != "")'
        '"$key": "$util.escapeJavaScript($obj[$key].S).replaceAll("\\\\\'","\'")"'
        '$comma#end#end',
        '#define($outputConditionalNumber)#if("$!obj[$key].N" != "")'
        '"$key": $obj[$key].N$comma#end#end',
        '#define($outputConditionalBoolean)#if("$!obj[$key].BOOL" != "")'
        '"$key": $obj[$key].BOOL$comma#end#end',
        '#define($outputConditionalList)#if("$!obj[$key].L" != "")'
        '"$key": $input.json("$path.$key.L")$comma#end#end',
        '#define($outputConditionalMap)#if("$!obj[$key].M" != "")'
        '"$key": $input.json("$path.$key.M")$comma#end#end',
    ]
)

_MACROS = {
    PropertyKind.STRING: 'String',
    PropertyKind.NUMBER: 'Number',
    PropertyKind.BOOLEAN: 'Boolean',
    PropertyKind.ARRAY: 'List',
    PropertyKind.OBJECT: 'Map',
    PropertyKind.UNRESOLVED: 'String',
}


@dataclasses.dataclass(frozen=True)
class TemplatePair:
    request: str
    response: str


def _field_lines(declaration: TypeDeclaration) -> list[str]:
    """One line per property: conditional values first, then key attributes."""
    values = declaration.value_properties
    keys = declaration.key_properties
    lines = []
    for index, prop in enumerate(values):
        later = index < len(values) - 1 or bool(keys)
        separator = ',' if later else ''
        lines.append(
            f'#set($key = "{prop.name}")#set($comma = "{separator}")'
            f'$outputConditional{_MACROS[prop.kind]}'
        )
    for index, prop in enumerate(keys):
        separator = ',' if index < len(keys) - 1 else ''
        lines.append(_key_line(prop) + separator)
    return lines


def _key_line(prop: Property) -> str:
    if prop.kind is PropertyKind.NUMBER:
        return f'"{prop.name}": $obj.{prop.name}.N'
    return f'"{prop.name}": "$util.escapeJavaScript($obj.{prop.name}.S)"'


def _json_object(entries: Mapping[str, str]) -> str:
    """Render pre-rendered values as a one-line JSON object."""
    return '{' + ', '.join(f'{json.dumps(k)}: {v}' for k, v in entries.items()) + '}'


class TemplateGenerator:
    """Builds request/response templates for store-backed endpoints.

    Example:
        >>> generator = TemplateGenerator(default_limit=50)
        >>> pair = generator.build(record, declaration)
        >>> print(pair.request)
    """

    def __init__(self, default_limit: int = DEFAULT_LIMIT):
        self.default_limit = default_limit

    def build(
        self, record: EndpointRecord, declaration: TypeDeclaration | None
    ) -> TemplatePair:
        """Build both templates of a store-backed endpoint.

        Args:
            record: The endpoint; its backing must be :class:`StoreBacked`.
            declaration: The parsed output type, or ``None`` when it could not
                be resolved.

        Raises:
            InvalidStoreConfigError: If the store configuration is inconsistent.
            TypeError: If the endpoint is not store-backed.
        """
        store = record.backing
        if not isinstance(store, StoreBacked):
            raise TypeError(f"endpoint '{record.name}' is not store-backed")
        store.validate(record.name)

        if declaration is None:
            request = GENERIC_REQUEST_TEMPLATE
            response = GENERIC_RESPONSE_TEMPLATE
        elif store.action is StoreAction.GET_ITEM:
            request = self.get_item_request(store)
            response = self.get_item_response(store, declaration)
        elif store.action is StoreAction.QUERY:
            request = self.query_request(store)
            response = self.query_response(store, declaration)
        else:
            assert_never(store.action)

        if store.request_template_override is not None:
            request = store.request_template_override
        if store.response_template_override is not None:
            response = store.response_template_override
        return TemplatePair(request, response)

    def get_item_request(self, store: StoreBacked) -> str:
        key = f'"pk":{{"S":"{store.partition_key}"}}'
        if store.sort_key:
            key += f',"sk":{{"S":"{store.sort_key}"}}'
        return f'{{"TableName":{json.dumps(store.table_name)},"Key":{{{key}}}}}'

    def query_request(self, store: StoreBacked) -> str:
        limit = store.default_limit or self.default_limit
        lines = [
            "#set($limit = $input.params().querystring.get('limit'))",
            f'#if("$!limit" == "")#set($limit = {limit})#end',
            '#if($context.httpMethod == "POST" || $context.httpMethod == "PUT")',
            "#set($token = $input.path('$.nextToken'))",
            '#else',
            "#set($token = $input.params().querystring.get('nextToken'))",
            '#end',
            '{',
            f'  "TableName": {json.dumps(store.table_name)},',
        ]
        if store.index_name:
            lines.append(f'  "IndexName": {json.dumps(store.index_name)},')

        condition = store.key_condition_expression or self._derived_condition(store)
        lines.append(f'  "KeyConditionExpression": {json.dumps(condition)},')

        names, values = self._derived_attributes(store, condition)
        names.update((k, json.dumps(v)) for k, v in store.expression_attribute_names.items())
        values.update(
            (k, json.dumps(v)) for k, v in store.expression_attribute_values.items()
        )
        if names:
            lines.append(f'  "ExpressionAttributeNames": {_json_object(names)},')
        if values:
            lines.append(f'  "ExpressionAttributeValues": {_json_object(values)},')
        if store.filter_expression:
            lines.append(f'  "FilterExpression": {json.dumps(store.filter_expression)},')

        lines += [
            '  #if("$!token" != "")',
            '  "ExclusiveStartKey": $util.base64Decode($util.urlDecode($token)'
            '.replace("-", "+").replace("_", "/")),',
            '  #end',
            '  "Limit": $limit',
            '}',
        ]
        return '\n'.join(lines)

    @staticmethod
    def _derived_condition(store: StoreBacked) -> str:
        condition = '#pk = :pk'
        if store.sort_key:
            condition += ' AND begins_with(#sk, :sk)'
        return condition

    @staticmethod
    def _derived_attributes(
        store: StoreBacked, condition: str
    ) -> tuple[dict[str, str], dict[str, str]]:
        """Names and values for the ``#pk``/``:pk`` placeholders ``condition`` uses."""
        prefix = store.index_name or ''
        names: dict[str, str] = {}
        values: dict[str, str] = {}
        for placeholder, template in (('pk', store.partition_key), ('sk', store.sort_key)):
            if not template:
                continue
            if f'#{placeholder}' in condition:
                names[f'#{placeholder}'] = json.dumps(f'{prefix}{placeholder}')
            if f':{placeholder}' in condition:
                values[f':{placeholder}'] = f'{{"S": "{template}"}}'
        return names, values

    def get_item_response(self, store: StoreBacked, declaration: TypeDeclaration) -> str:
        lines = [
            RESPONSE_HEADER,
            '#set($obj = $inputRoot.Item)',
            '#set($path = "$.Item")',
        ]
        body = ['{', *_field_lines(declaration), '}']
        if store.disable_item_not_found:
            lines += body
        else:
            lines += [
                '#if("$!obj" == "")',
                '#set($context.responseOverride.status = 404)',
                '{"message": "Item not found"}',
                '#else',
                *body,
                '#end',
            ]
        return '\n'.join(lines)

    def query_response(self, store: StoreBacked, declaration: TypeDeclaration) -> str:
        key = json.dumps(store.response_key or 'items')
        lines = [
            RESPONSE_HEADER,
            '#if(!$inputRoot.Items || $inputRoot.Items.isEmpty())',
            f'{{{key}: []}}',
            '#else',
            '{',
            f'{key}: [',
            '#foreach($obj in $inputRoot.Items)',
            '#set($path = "$.Items[$foreach.index]")',
            '{',
            *_field_lines(declaration),
            '}#if($foreach.hasNext),#end',
            '#end',
            ']#if("$!inputRoot.LastEvaluatedKey" != ""),',
            '"nextToken": "$util.base64Encode($input.json(\'$.LastEvaluatedKey\'))'
            '.replace(\'+\', \'-\').replace(\'/\', \'_\')"#end',
            '}',
            '#end',
        ]
        return '\n'.join(lines)


def generate_templates(
    records: Mapping[str, EndpointRecord],
    resolved_types: Mapping[str, TypeDeclaration],
    output_dir: str | Path | UPath,
    emitter: FileEmitter | None = None,
    default_limit: int = DEFAULT_LIMIT,
    extension: str = '.vtl',
) -> list[GeneratedArtifact]:
    """Write ``vtl/<name>-request.vtl`` and ``vtl/<name>-response.vtl``.

    Only store-backed endpoints get templates. Every configuration is
    validated before the first file is written.

    Raises:
        InvalidStoreConfigError: If any store-backed endpoint is misconfigured.
    """
    emitter = emitter or FileEmitter(output_dir)
    generator = TemplateGenerator(default_limit)

    store_backed = [r for r in records.values() if r.is_store_backed]
    for record in store_backed:
        record.backing.validate(record.name)

    artifacts = []
    for record in store_backed:
        declaration = resolved_types.get(record.output_type) if record.output_type else None
        if declaration is None:
            logger.info(
                f"Output type of '{record.name}' is unresolved; using pass-through templates"
            )
        logger.info(f'Generating templates for endpoint: {record.name}')
        pair = generator.build(record, declaration)
        artifacts.append(
            emitter.write_text(
                f'vtl/{record.name}-request{extension}',
                pair.request,
                ArtifactKind.REQUEST_TEMPLATE,
            )
        )
        artifacts.append(
            emitter.write_text(
                f'vtl/{record.name}-response{extension}',
                pair.response,
                ArtifactKind.RESPONSE_TEMPLATE,
            )
        )
    return artifacts
