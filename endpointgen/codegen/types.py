"""Data model for endpointgen code generation.

This module provides:
- EndpointRecord and its two implementation variants (ComputeBacked, StoreBacked)
- TypeDeclaration and Property for type declarations read from source files
- Resolved / Unresolved results returned by the parsers and resolvers
- GeneratedArtifact for tracking what a run wrote
"""

import dataclasses
import enum
from typing import Any, Generic, TypeVar, assert_never

from endpointgen.exceptions import InvalidStoreConfigError

__all__ = [
    'ArtifactKind',
    'ComputeBacked',
    'EndpointRecord',
    'GeneratedArtifact',
    'HttpMethod',
    'Property',
    'PropertyKind',
    'Resolution',
    'Resolved',
    'StoreAction',
    'StoreBacked',
    'TypeDeclaration',
    'Unresolved',
    'is_key_attribute',
]

T = TypeVar('T')

# Type names that carry no type information for the generated client.
NO_TYPE_NAMES = frozenset({'never', 'any', 'void', 'undefined', 'unknown'})


class HttpMethod(str, enum.Enum):
    GET = 'GET'
    POST = 'POST'
    PUT = 'PUT'
    DELETE = 'DELETE'

    @property
    def has_body(self) -> bool:
        return self is not HttpMethod.GET


class StoreAction(str, enum.Enum):
    GET_ITEM = 'GetItem'
    QUERY = 'Query'


class PropertyKind(str, enum.Enum):
    STRING = 'string'
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    ARRAY = 'array'
    OBJECT = 'object'
    UNRESOLVED = 'unresolved'


class ArtifactKind(str, enum.Enum):
    CLIENT_SOURCE = 'client-source'
    MOCK_SOURCE = 'mock-source'
    REQUEST_TEMPLATE = 'request-template'
    RESPONSE_TEMPLATE = 'response-template'
    INDEX = 'index'
    MANIFEST = 'manifest'
    INTERFACE = 'interface'
    README = 'readme'
    IGNORE_FILE = 'ignore-file'
    CONTRACT_TEST = 'contract-test'


@dataclasses.dataclass(frozen=True)
class Resolved(Generic[T]):
    """A successful parse or lookup."""

    value: T


@dataclasses.dataclass(frozen=True)
class Unresolved:
    """A parse or lookup that found nothing usable."""

    reason: str


Resolution = Resolved[T] | Unresolved


@dataclasses.dataclass
class ComputeBacked:
    """Endpoint implemented by a compute function.

    ``entry`` is the raw source text of the entry expression, for example
    ``join(__dirname, "../lambda/getToppings.ts")``; it is ``None`` when the
    declaration does not say. The resource binding function is opaque to the
    generator and only kept as text.
    """

    entry: str | None = None
    queue: bool = False
    resource_binding: str | None = None


@dataclasses.dataclass
class StoreBacked:
    """Endpoint implemented by a direct key-value store integration."""

    table_name: str | None
    action: StoreAction = StoreAction.QUERY
    partition_key: str | None = None
    sort_key: str | None = None
    index_name: str | None = None
    key_condition_expression: str | None = None
    filter_expression: str | None = None
    expression_attribute_names: dict[str, Any] = dataclasses.field(
        default_factory=dict
    )
    expression_attribute_values: dict[str, Any] = dataclasses.field(
        default_factory=dict
    )
    default_limit: int | None = None
    request_template_override: str | None = None
    response_template_override: str | None = None
    response_key: str | None = None
    disable_item_not_found: bool = False

    def validate(self, endpoint: str) -> None:
        """Check the configuration is usable for template generation.

        Raises:
            InvalidStoreConfigError: If the configuration is inconsistent.
        """
        if not self.table_name:
            raise InvalidStoreConfigError(endpoint, 'tableName is required')

        if self.action is StoreAction.GET_ITEM:
            if self.index_name:
                raise InvalidStoreConfigError(
                    endpoint,
                    f"GetItem cannot use indexName '{self.index_name}'; "
                    'use a Query to read from an index',
                )
            if not self.partition_key:
                raise InvalidStoreConfigError(
                    endpoint, 'GetItem requires a partition key template (pk)'
                )
        elif self.action is StoreAction.QUERY:
            if not self.key_condition_expression and not self.partition_key:
                raise InvalidStoreConfigError(
                    endpoint,
                    'Query requires a keyConditionExpression or a partition key template (pk)',
                )
        else:
            assert_never(self.action)


@dataclasses.dataclass
class EndpointRecord:
    name: str
    path: str
    method: HttpMethod
    backing: ComputeBacked | StoreBacked
    input_type: str | None = None
    output_type: str | None = None
    description: str | None = None

    @property
    def params_type_name(self) -> str:
        """Name of the generated call parameters type, e.g. ``GetItemParams``."""
        return f'{self.name[:1].upper()}{self.name[1:]}Params'

    @property
    def is_store_backed(self) -> bool:
        return isinstance(self.backing, StoreBacked)

    def referenced_types(self) -> list[str]:
        """Named input/output types, output first, without duplicates."""
        names = []
        for type_name in (self.output_type, self.input_type):
            if type_name and type_name not in names:
                names.append(type_name)
        return names


def is_key_attribute(name: str) -> bool:
    """Whether a property is a store key attribute (``pk``, ``sk`` or ``gsi*``)."""
    return name in ('pk', 'sk') or name.startswith('gsi')


@dataclasses.dataclass(frozen=True)
class Property:
    name: str
    type_text: str
    kind: PropertyKind
    optional: bool = False

    @property
    def is_key_attribute(self) -> bool:
        return is_key_attribute(self.name)


@dataclasses.dataclass(frozen=True)
class TypeDeclaration:
    """A type declaration read from a source file, properties in source order."""

    name: str
    properties: tuple[Property, ...] = ()

    @property
    def value_properties(self) -> list[Property]:
        return [p for p in self.properties if not p.is_key_attribute]

    @property
    def key_properties(self) -> list[Property]:
        return [p for p in self.properties if p.is_key_attribute]


@dataclasses.dataclass(frozen=True)
class GeneratedArtifact:
    kind: ArtifactKind
    path: str
