"""
Typed view of an OpenAPI document.

The classes in this module are read-only after construction. They accept
Swagger 2.0 and OpenAPI 3.x documents; OpenAPI 3 constructs are mapped onto
the Swagger 2 shape the compiler works with:

- `components.schemas` and `components.parameters` take the place of
  `definitions` and `parameters`
- a `requestBody` becomes one `in: body` parameter named `body`
- response and request body `content` is read from `application/json`,
  falling back to the first media type
- `nullable: true` adds `null` to the schema's type list
- the path of the first server URL is the base path
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import jsonpointer

from protoize.errors import ProtoizeError, UnresolvedReferenceError

VERBS = ['get', 'put', 'post', 'patch', 'delete']

SWAGGER2_DEFINITIONS = '#/definitions/'
SWAGGER2_PARAMETERS = '#/parameters/'
OPENAPI3_SCHEMAS = '#/components/schemas/'
OPENAPI3_PARAMETERS = '#/components/parameters/'


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    return str(value)


def _parse_proto_tag(value: Any) -> int:
    if value is None or value == '':
        return 0
    if isinstance(value, bool):
        raise ProtoizeError(f"invalid x-proto-tag {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise ProtoizeError(f"invalid x-proto-tag {value!r}", cause=e) from e


def _schema_types(data: Dict[str, Any]) -> List[str]:
    t = data.get('type')
    if t is None or t == '':
        types = []
    elif isinstance(t, list):
        types = [_stringify(x) for x in t]
    else:
        types = [_stringify(t)]
    if data.get('nullable') is True and types and 'null' not in types:
        types.append('null')
    return types


def _media_schema(content: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Pick the schema of an OpenAPI 3 `content` map, preferring application/json."""
    if not content:
        return None
    media = content.get('application/json')
    if media is None:
        media = next(iter(content.values()))
    if not isinstance(media, dict):
        return None
    return media.get('schema')


def _deref(doc: Dict[str, Any], node: Any) -> Any:
    """Inline a local `$ref` on a response or request body object."""
    seen = set()
    while isinstance(node, dict) and isinstance(node.get('$ref'), str) and node['$ref'].startswith('#'):
        ref = node['$ref']
        if ref in seen:
            raise UnresolvedReferenceError(ref).wrap("circular reference")
        seen.add(ref)
        try:
            node = jsonpointer.resolve_pointer(doc, ref[1:])
        except jsonpointer.JsonPointerException as e:
            raise UnresolvedReferenceError(ref) from e
    return node


@dataclass
class Schema:
    """One OpenAPI schema node."""
    ref: str = ''
    type: List[str] = field(default_factory=list)
    format: str = ''
    enum: List[str] = field(default_factory=list)
    description: str = ''
    properties: Dict[str, 'Schema'] = field(default_factory=dict)
    items: Optional['Schema'] = None
    additional_properties: Optional['Schema'] = None
    proto_tag: int = 0
    proto_name: str = ''

    @classmethod
    def from_dict(cls, data: Any) -> 'Schema':
        if isinstance(data, bool):
            # `additionalProperties: true` style schemas
            return cls()
        if not isinstance(data, dict):
            raise ProtoizeError(f"schema must be an object, got {type(data).__name__}")
        ap = data.get('additionalProperties')
        return cls(
            ref=data.get('$ref', '') or '',
            type=_schema_types(data),
            format=_stringify(data['format']) if data.get('format') is not None else '',
            enum=[_stringify(v) for v in data.get('enum') or []],
            description=data.get('description', '') or '',
            properties={name: cls.from_dict(prop) for name, prop in (data.get('properties') or {}).items()},
            items=cls.from_dict(data['items']) if isinstance(data.get('items'), (dict, bool)) else None,
            additional_properties=None if ap is None or ap is False else cls.from_dict(ap),
            proto_tag=_parse_proto_tag(data.get('x-proto-tag')),
            proto_name=data.get('x-proto-name', '') or '',
        )

    def copy(self, **changes) -> 'Schema':
        """Shallow copy with some attributes replaced."""
        clone = copy.copy(self)
        for key, value in changes.items():
            setattr(clone, key, value)
        return clone

    @property
    def first_type(self) -> str:
        return self.type[0] if self.type else ''


@dataclass
class Parameter:
    """An operation or global parameter."""
    name: str = ''
    location: str = ''
    description: str = ''
    required: bool = False
    ref: str = ''
    type: List[str] = field(default_factory=list)
    format: str = ''
    enum: List[str] = field(default_factory=list)
    items: Optional[Schema] = None
    schema: Optional[Schema] = None
    proto_tag: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Parameter':
        return cls(
            name=data.get('name', '') or '',
            location=data.get('in', '') or '',
            description=data.get('description', '') or '',
            required=bool(data.get('required', False)),
            ref=data.get('$ref', '') or '',
            type=_schema_types(data),
            format=_stringify(data['format']) if data.get('format') is not None else '',
            enum=[_stringify(v) for v in data.get('enum') or []],
            items=Schema.from_dict(data['items']) if isinstance(data.get('items'), dict) else None,
            schema=Schema.from_dict(data['schema']) if isinstance(data.get('schema'), (dict, bool)) else None,
            proto_tag=_parse_proto_tag(data.get('x-proto-tag')),
        )

    @property
    def is_array(self) -> bool:
        """True if the parameter carries a list of values."""
        if self.items is not None:
            return True
        return self.schema is not None and 'array' in self.schema.type


@dataclass
class Response:
    description: str = ''
    schema: Optional[Schema] = None


@dataclass
class Endpoint:
    """One HTTP operation."""
    path: str
    verb: str
    summary: str = ''
    description: str = ''
    operation_id: str = ''
    parameters: List[Parameter] = field(default_factory=list)
    responses: Dict[str, Response] = field(default_factory=dict)
    custom_options: Dict[str, Any] = field(default_factory=dict)
    deprecated: bool = False


@dataclass
class Path:
    parameters: List[Parameter] = field(default_factory=list)
    endpoints: Dict[str, Endpoint] = field(default_factory=dict)

    def operations(self) -> List[Endpoint]:
        """Endpoints in get, put, post, patch, delete order."""
        return [self.endpoints[verb] for verb in VERBS if verb in self.endpoints]


@dataclass
class ExtensionField:
    name: str
    type: str
    number: int


@dataclass
class Extension:
    base: str
    fields: List[ExtensionField] = field(default_factory=list)


@dataclass
class OpenApiSpec:
    """
    A parsed OpenAPI document.

    Attributes:
        title: The info.title, from which package and service names derive.
        base_path: Prefix applied to every path in HTTP annotations.
        definitions: Named schemas.
        parameters: Named global parameters.
        paths: Path templates and their operations.
        global_options: Package-level options from `x-global-options`.
        extensions: `extend` blocks from `x-extensions`.
        definitions_prefix: The `$ref` prefix of named schemas.
        parameters_prefix: The `$ref` prefix of named parameters.
    """
    title: str = ''
    base_path: str = ''
    definitions: Dict[str, Schema] = field(default_factory=dict)
    parameters: Dict[str, Parameter] = field(default_factory=dict)
    paths: Dict[str, Path] = field(default_factory=dict)
    global_options: Dict[str, str] = field(default_factory=dict)
    extensions: List[Extension] = field(default_factory=list)
    definitions_prefix: str = SWAGGER2_DEFINITIONS
    parameters_prefix: str = SWAGGER2_PARAMETERS

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> 'OpenApiSpec':
        if not isinstance(doc, dict):
            raise ProtoizeError("an OpenAPI document must be an object")
        openapi3 = 'openapi' in doc
        info = doc.get('info') or {}
        spec = cls(title=_stringify(info.get('title', '')) if info.get('title') is not None else '')
        if openapi3:
            components = doc.get('components') or {}
            schemas = components.get('schemas') or {}
            parameters = components.get('parameters') or {}
            spec.definitions_prefix = OPENAPI3_SCHEMAS
            spec.parameters_prefix = OPENAPI3_PARAMETERS
            servers = doc.get('servers') or []
            if servers and isinstance(servers[0], dict):
                spec.base_path = urlparse(servers[0].get('url', '') or '').path.rstrip('/')
        else:
            schemas = doc.get('definitions') or {}
            parameters = doc.get('parameters') or {}
            spec.base_path = doc.get('basePath', '') or ''
            if spec.base_path == '/':
                spec.base_path = ''

        try:
            spec.definitions = {name: Schema.from_dict(s) for name, s in schemas.items()}
            spec.parameters = {name: cls._parameter(doc, p) for name, p in parameters.items()}
        except ProtoizeError as e:
            raise e.wrap("failed to read definitions")
        spec.global_options = {k: _stringify(v) for k, v in (doc.get('x-global-options') or {}).items()}
        for ext in doc.get('x-extensions') or []:
            spec.extensions.append(Extension(
                base=ext.get('base', ''),
                fields=[ExtensionField(f.get('name', ''), f.get('type', ''), _parse_proto_tag(f.get('number')))
                        for f in ext.get('fields') or []]))
        for path, item in (doc.get('paths') or {}).items():
            try:
                spec.paths[path] = cls._path(doc, path, item or {}, openapi3)
            except ProtoizeError as e:
                raise e.wrap(f"failed to read path {path}")
        return spec

    @staticmethod
    def _parameter(doc: Dict[str, Any], data: Dict[str, Any]) -> Parameter:
        if isinstance(data, dict) and '$ref' in data and not data['$ref'].startswith(('#/parameters/', '#/components/parameters/')):
            data = _deref(doc, data)
        return Parameter.from_dict(data)

    @classmethod
    def _path(cls, doc: Dict[str, Any], path: str, item: Dict[str, Any], openapi3: bool) -> Path:
        result = Path(parameters=[cls._parameter(doc, p) for p in item.get('parameters') or []])
        for verb in VERBS:
            op = item.get(verb)
            if op is None:
                continue
            endpoint = Endpoint(
                path=path,
                verb=verb,
                summary=op.get('summary', '') or '',
                description=op.get('description', '') or '',
                operation_id=op.get('operationId', '') or '',
                parameters=[cls._parameter(doc, p) for p in op.get('parameters') or []],
                custom_options=dict(op.get('x-options') or {}),
                deprecated=op.get('deprecated') is True,
            )
            if openapi3 and op.get('requestBody') is not None:
                body = _deref(doc, op['requestBody'])
                schema = _media_schema(body.get('content') or {})
                if schema is not None:
                    endpoint.parameters.append(Parameter(
                        name='body', location='body', description=body.get('description', '') or '',
                        required=bool(body.get('required', False)), schema=Schema.from_dict(schema)))
            for code, response in (op.get('responses') or {}).items():
                response = _deref(doc, response) or {}
                schema = _media_schema(response.get('content') or {}) if openapi3 else response.get('schema')
                endpoint.responses[_stringify(code)] = Response(
                    description=response.get('description', '') or '',
                    schema=Schema.from_dict(schema) if schema is not None else None)
            result.endpoints[verb] = endpoint
        return result
