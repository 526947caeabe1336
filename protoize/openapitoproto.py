"""
Compiles OpenAPI (Swagger 2.0 and OpenAPI 3.x) documents into Protobuf v3 schemas.

The compiler runs in phases over one `CompilationContext`:

1. global options
2. named schemas and global parameters, tolerating forward references
3. reference resolution, which replaces the forward-reference placeholders
4. extensions
5. paths, which produce request/response messages and service RPCs

The resulting `Package` is handed to `ProtoEncoder` for printing.
"""

# pylint: disable=line-too-long

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from protoize.common import (all_caps, endpoint_name, looks_like_integer, make_comment, normalize_enum_name,
                             normalize_field_name, package_name, pascal, service_name, snake)
from protoize.errors import (DuplicateFieldNumberError, ProtoizeError, RequestShapeError, ResponseShapeError,
                             UnresolvedReferenceError, UnsupportedSchemaTypeError)
from protoize.openapiloader import load_openapi
from protoize.openapimodel import OpenApiSpec, Path
from protoize.openapimodel import Extension as OpenApiExtension
from protoize.openapimodel import Parameter as OpenApiParameter
from protoize.openapimodel import Schema
from protoize.protoencoder import ProtoEncoder
from protoize.protomodel import (ANY, INT32, INT64, KNOWN_DEFINITIONS, KNOWN_IMPORTS, LIST_VALUE, NULL_VALUE,
                                 STRING, STRUCT, BOOL, BYTES, DOUBLE, FLOAT, RPC, Builtin, Enum,
                                 Extension, ExtensionField, Field, GlobalOption, HTTPAnnotation, Map, Message,
                                 Package, ProtoType, Reference, RPCOption, Service, boxed, is_message)
from protoize.refresolver import ReferenceResolver, find_unresolved_references
from protoize.typeregistry import Scope, TypeRegistry

logger = logging.getLogger(__name__)

PHASE_INVALID = 'invalid'
PHASE_DEFINITIONS = 'definitions'
PHASE_EXTENSIONS = 'extensions'
PHASE_PATHS = 'paths'

SCALAR_TYPES = ['string', 'integer', 'number', 'boolean']
RESPONSE_CODES = ['200', '201']


@dataclass(eq=False)
class Parameter:
    """
    A compiled global parameter.

    Wraps the parameter's type together with the field name, number and
    repeated flag every request message referencing the parameter must use.
    It only lives in the definitions table; fields always receive the
    wrapped type.
    """
    type: ProtoType
    parameter_name: str
    number: int = 0
    repeated: bool = False

    @property
    def name(self) -> str:
        return self.type.name

    @property
    def priority(self) -> int:
        return self.type.priority


def unwrap(t: Any) -> ProtoType:
    return t.type if isinstance(t, Parameter) else t


class CompilationContext:
    """
    State shared by one compilation run.

    Attributes:
        spec: The document being compiled.
        package: The package under construction.
        service: The single service of the package.
        registry: Declared messages and enums per scope.
        definitions: Compiled types keyed by `$ref` string. First entry wins.
        imports: Import paths already added to the package.
        rpcs: RPCs keyed by name. First entry wins.
        wrapper_messages: Package-level list wrappers created for map values.
        phase: The current compilation phase.
    """

    def __init__(self, spec: OpenApiSpec, package: Package, service: Service) -> None:
        self.spec = spec
        self.package = package
        self.service = service
        self.registry = TypeRegistry(package)
        self.definitions: Dict[str, ProtoType | Parameter] = {}
        self.imports: Set[str] = set()
        self.rpcs: Dict[str, RPC] = {}
        self.wrapper_messages: Dict[str, Message] = {}
        self.phase = PHASE_INVALID

    def add_import(self, lib: str) -> None:
        if lib in self.imports:
            return
        self.imports.add(lib)
        self.package.add_import(lib)

    def add_import_for_type(self, name: str) -> None:
        if name in KNOWN_IMPORTS:
            self.add_import(KNOWN_IMPORTS[name])

    def add_definition(self, ref: str, t: ProtoType | Parameter) -> None:
        if ref in self.definitions:
            return
        self.definitions[ref] = t

    def get_type_from_reference(self, ref: str) -> ProtoType | Parameter:
        if ref in KNOWN_DEFINITIONS:
            return KNOWN_DEFINITIONS[ref]
        if ref in self.definitions:
            return self.definitions[ref]
        raise UnresolvedReferenceError(ref)

    def add_rpc(self, rpc: RPC) -> None:
        if rpc.name in self.rpcs:
            logger.debug("rpc %s already defined, keeping the first one", rpc.name)
            return
        self.add_import_for_type(rpc.parameter.name)
        self.add_import_for_type(rpc.response.name)
        self.rpcs[rpc.name] = rpc
        self.service.add_rpc(rpc)


class OpenApiToProto:
    """
    Converts OpenAPI documents to Protobuf packages.

    Attributes:
        annotate: Emit `google.api.http` options for gRPC-gateway.
        skip_rpcs: Only compile schemas; do not generate RPCs.
        prefix_enums: Prefix every enum value with the enum name, also at package level.
        wrap_primitives: Use wrapper messages (e.g. StringValue) for scalar fields.
        default_package: Package name used when the document has no title.
    """

    def __init__(self) -> None:
        self.annotate: bool = False
        self.skip_rpcs: bool = False
        self.prefix_enums: bool = False
        self.wrap_primitives: bool = False
        self.default_package: str = 'openapi'

    def compile_openapi(self, spec: OpenApiSpec) -> Package:
        """Compile a parsed OpenAPI document into a Protobuf package."""
        if spec.title.strip():
            package = Package(package_name(spec.title))
            service = Service(service_name(spec.title))
        else:
            package = Package(self.default_package)
            service = Service(service_name(self.default_package))
        package.add_type(service)
        ctx = CompilationContext(spec, package, service)
        scope: Scope = (package,)

        if self.annotate:
            ctx.add_import('google/api/annotations.proto')

        self.compile_global_options(ctx, spec.global_options)

        try:
            self.compile_definitions(ctx, scope, spec)
        except ProtoizeError as e:
            raise e.wrap("failed to compile definitions")
        try:
            self.compile_parameters(ctx, scope, spec)
        except ProtoizeError as e:
            raise e.wrap("failed to compile parameters")

        try:
            self.resolve(ctx)
        except ProtoizeError as e:
            raise e.wrap("failed to resolve references")

        ctx.phase = PHASE_EXTENSIONS
        for ext in spec.extensions:
            package.add_type(self.compile_extension(ctx, ext))

        if not self.skip_rpcs:
            ctx.phase = PHASE_PATHS
            try:
                self.compile_paths(ctx, scope, spec.paths)
            except ProtoizeError as e:
                raise e.wrap("failed to compile paths")

        unresolved = find_unresolved_references(package)
        if unresolved:
            raise UnresolvedReferenceError(unresolved[0]).wrap("reference left unresolved after compilation")
        return package

    def compile_global_options(self, ctx: CompilationContext, options: Dict[str, str]) -> None:
        for name in sorted(options):
            ctx.package.add_option(GlobalOption(name, options[name]))

    def compile_definitions(self, ctx: CompilationContext, scope: Scope, spec: OpenApiSpec) -> None:
        ctx.phase = PHASE_DEFINITIONS
        for name in sorted(spec.definitions):
            ref = spec.definitions_prefix + name
            try:
                t = self.compile_schema(ctx, scope, pascal(name), spec.definitions[name])
            except ProtoizeError as e:
                raise e.wrap(f"failed to compile {ref}")
            ctx.add_definition(ref, t)

    def compile_parameters(self, ctx: CompilationContext, scope: Scope, spec: OpenApiSpec) -> None:
        """Compile the global parameters. Each becomes a Parameter entry of the definitions table."""
        ctx.phase = PHASE_DEFINITIONS
        for name in sorted(spec.parameters):
            ref = spec.parameters_prefix + name
            param = spec.parameters[name]
            try:
                _, schema = self.compile_parameter_to_schema(ctx, param)
                t = unwrap(self.compile_schema(ctx, scope, pascal(name), schema))
            except ProtoizeError as e:
                raise e.wrap(f"failed to compile {ref}")
            ctx.add_definition(ref, Parameter(t, param.name or t.name, param.proto_tag, param.is_array))

    def resolve(self, ctx: CompilationContext) -> None:
        """Replace forward-reference placeholders in the package and in the definitions table."""
        resolver = ReferenceResolver(lambda ref: unwrap(ctx.get_type_from_reference(ref)))
        resolver.resolve_package(ctx.package)
        for ref, t in list(ctx.definitions.items()):
            try:
                if isinstance(t, Parameter):
                    t.type = resolver.resolve_type(t.type)
                else:
                    ctx.definitions[ref] = resolver.resolve_type(t)
            except ProtoizeError as e:
                raise e.wrap(f"failed to resolve {ref}")

    def compile_extension(self, ctx: CompilationContext, ext: OpenApiExtension) -> Extension:
        e = Extension(ext.base)
        for f in ext.fields:
            e.add_field(ExtensionField(f.name, f.type, f.number))
            ctx.add_import_for_type(f.type)
        # the extended type usually comes from another file
        ctx.add_import_for_type(ext.base)
        return e

    def compile_reference_schema(self, ctx: CompilationContext, schema: Schema) -> ProtoType | Parameter:
        """
        Look up a `$ref`.

        While named schemas and parameters are compiled, a reference to a
        definition that has not been compiled yet yields a Reference
        placeholder. In any later phase a missing reference is an error.
        """
        try:
            return ctx.get_type_from_reference(schema.ref)
        except UnresolvedReferenceError:
            if ctx.phase == PHASE_DEFINITIONS:
                logger.debug("deferring reference %s", schema.ref)
                return Reference(schema.ref)
            raise

    def compile_schema(self, ctx: CompilationContext, scope: Scope, name: str, schema: Schema) -> ProtoType | Parameter:
        """
        Compile one schema node into a Protobuf type.

        Args:
            ctx: The compilation context.
            scope: The chain of containers enclosing the schema, outermost first.
            name: The name for a message or enum created from the schema.
            schema: The schema node.

        Returns:
            The compiled type. Arrays compile to their item type; the caller
            marks the field repeated.
        """
        if schema.ref:
            try:
                return self.compile_reference_schema(ctx, schema)
            except ProtoizeError as e:
                raise e.wrap("failed to resolve reference")
        schema = self._strip_nullable_container(schema)
        raw_name = name
        name = pascal(name)
        for candidate in (raw_name, name):
            existing = ctx.registry.lookup(candidate, scope)
            if existing is not None:
                return self.apply_builtin_format(existing, schema.format)

        if len(schema.type) > 1:
            return self.compile_schema_multi_type(ctx, scope, schema)

        if not schema.type or 'object' in schema.type:
            ap = schema.additional_properties
            if ap is not None:
                # additionalProperties: true or {}
                if not ap.type and not ap.ref and not ap.properties:
                    ctx.add_import_for_type(STRUCT.name)
                    return STRUCT
                return self.compile_map(ctx, scope, name, raw_name.removesuffix('Message'), ap)

            message = Message(name, comment=schema.description)
            try:
                self.compile_schema_properties(ctx, scope + (message,), message, schema.properties)
            except ProtoizeError as e:
                raise e.wrap(f"failed to compile properties for {name}")
            ctx.registry.register(message, scope[-1], scope)
            return message

        if 'array' in schema.type:
            if schema.items is None:
                raise UnsupportedSchemaTypeError('array', f"array schema {name} has no items")
            t = self.compile_schema(ctx, scope, name, schema.items.copy(description=''))
            ctx.registry.register(t, scope[-1], scope)
            return t

        if any(t in schema.type for t in SCALAR_TYPES):
            if schema.enum:
                enum = self.compile_enum(ctx, scope, name.removesuffix('Message'), schema.enum)
                ctx.registry.register(enum, scope[-1], scope)
                return enum
            t = ctx.registry.lookup(schema.first_type, scope)
            if t is None:
                raise UnsupportedSchemaTypeError(schema.first_type)
            return self.apply_builtin_format(t, schema.format)

        if schema.type == ['null']:
            return NULL_VALUE

        raise UnsupportedSchemaTypeError(schema.first_type)

    def _strip_nullable_container(self, schema: Schema) -> Schema:
        """Drop `null` from nullable objects and arrays. Messages and repeated fields already have an empty state."""
        if len(schema.type) < 2 or 'null' not in schema.type:
            return schema
        types = [t for t in schema.type if t != 'null']
        if len(types) == 1 and types[0] in ('object', 'array'):
            return schema.copy(type=types)
        return schema

    def compile_schema_multi_type(self, ctx: CompilationContext, scope: Scope, schema: Schema) -> ProtoType:
        """
        Compile a schema declaring several types, e.g. `type: [string, "null"]`.

        A nullable scalar becomes its wrapper message. Anything else cannot be
        expressed in proto3 and becomes google.protobuf.Any.
        """
        has_null = False
        types = []
        for t in schema.type:
            if t.lower() == 'null':
                has_null = True
                continue
            types.append(t)

        if not has_null or len(types) != 1:
            return ANY

        t = ctx.registry.lookup(types[0], scope)
        if t is None or types[0] not in SCALAR_TYPES:
            raise UnsupportedSchemaTypeError(types[0], f"failed to get type for {types[0]}")
        return boxed(self.apply_builtin_format(t, schema.format))

    def compile_enum(self, ctx: CompilationContext, scope: Scope, name: str, elements: List[str]) -> Enum:
        """
        Compile enum values into an Enum named after `name`.

        Value names share one namespace per package in proto3, so values of
        nested enums, and all values when `prefix_enums` is set, carry the
        enum name as prefix. So does any value that is a bare number.
        """
        prefix = scope[-1] is not ctx.package or self.prefix_enums
        enum = Enum(pascal(name))
        for element in elements:
            element_name = element
            if prefix or looks_like_integer(element_name):
                element_name = name + '_' + element_name
            enum.add_element(all_caps(normalize_enum_name(element_name)))
        return enum

    def compile_map(self, ctx: CompilationContext, scope: Scope, name: str, raw_name: str, schema: Schema) -> Map:
        """
        Compile the `additionalProperties` schema of an object into a map type.

        Arrays cannot be map values, so a map of arrays gets a wrapper message
        holding the repeated values. The wrapper for an array of `$ref` items is
        shared: it is declared once at package level as `<Ref>List`.
        """
        if schema.ref:
            t = unwrap(self.compile_reference_schema(ctx, schema))
        elif schema.first_type == 'array':
            items = schema.items
            if items is not None and items.ref:
                t = self.create_ref_list_wrapper(ctx, scope, items)
            elif items is not None and items.properties:
                wrapper_name = name.removesuffix('Message') + 'List'
                item_type = unwrap(self.compile_schema(ctx, scope, name, items))
                ctx.registry.register(item_type, scope[-1], scope)
                t = self.create_list_wrapper(wrapper_name, normalize_field_name(snake(raw_name)) or 'items', item_type, schema.description)
                ctx.registry.register(t, scope[-1], scope)
            else:
                ctx.add_import_for_type(LIST_VALUE.name)
                t = LIST_VALUE
        else:
            t = unwrap(self.compile_schema(ctx, scope, name, schema))
            if isinstance(t, Map):
                # maps cannot nest
                ctx.add_import_for_type(STRUCT.name)
                t = STRUCT
        return Map(STRING, t)

    def create_list_wrapper(self, name: str, field_name: str, item_type: ProtoType, description: str = '') -> Message:
        message = Message(name, comment=f"automatically generated wrapper for a list of {item_type.name} items")
        message.add_field(Field(item_type, field_name, 1, repeated=True, comment=description))
        return message

    def create_ref_list_wrapper(self, ctx: CompilationContext, scope: Scope, items: Schema) -> Message:
        base_name = pascal(items.ref.rsplit('/', 1)[-1])
        if base_name in ctx.wrapper_messages:
            return ctx.wrapper_messages[base_name]
        item_type = unwrap(self.compile_reference_schema(ctx, items))
        wrapper = self.create_list_wrapper(self.list_wrapper_name(ctx, base_name), 'items', item_type)
        wrapper.comment = f"automatically generated wrapper for a list of {base_name} items"
        ctx.wrapper_messages[base_name] = wrapper
        ctx.registry.register(wrapper, scope[0], scope)
        return wrapper

    def list_wrapper_name(self, ctx: CompilationContext, base_name: str) -> str:
        """`<base>List`, or `<base>ListWrapper[N]` when a named schema or parameter already takes that name."""
        reserved = {pascal(name) for name in ctx.spec.definitions} | {pascal(name) for name in ctx.spec.parameters}
        candidate = base_name + 'List'
        suffix = 1
        while candidate in reserved or ctx.registry.lookup(candidate, (ctx.package,)) is not None:
            candidate = base_name + 'ListWrapper' + (str(suffix) if suffix > 1 else '')
            suffix += 1
        return candidate

    def compile_schema_properties(self, ctx: CompilationContext, scope: Scope, message: Message, properties: Dict[str, Schema]) -> None:
        """
        Compile object properties into the fields of `message`.

        Field numbers are assigned deterministically: explicit `x-proto-tag`
        numbers are kept as given, the remaining fields take the smallest free
        numbers in field name order.
        """
        compiled = []
        for prop_name in sorted(properties):
            prop = properties[prop_name]
            try:
                # the description goes to the field comment, not the nested type
                name, t, number, repeated = self.compile_property(ctx, scope, prop_name, prop.copy(description=''))
            except ProtoizeError as e:
                raise e.wrap(f"failed to compile property {prop_name}")
            compiled.append((normalize_field_name(snake(name)), t, number, repeated, prop.description))

        numbers = assign_field_numbers(message.name, [(name, number) for name, _, number, _, _ in compiled])
        for (name, t, _, repeated, comment), number in zip(compiled, numbers):
            message.add_field(Field(t, name, number, repeated, comment))
            ctx.add_import_for_type(t.value.name if isinstance(t, Map) else t.name)

    def compile_property(self, ctx: CompilationContext, scope: Scope, name: str, prop: Schema) -> Tuple[str, ProtoType, int, bool]:
        """
        Compile one property.

        Returns:
            The field name, type, explicit number (0 if unassigned) and repeated flag.
        """
        type_name = name + 'Message'
        prop = self._strip_nullable_container(prop)

        if len(prop.type) > 1:
            t = self.compile_schema_multi_type(ctx, scope, prop)
        elif not prop.type or 'object' in prop.type:
            t = self.compile_schema(ctx, scope, type_name, prop)
        elif 'array' in prop.type:
            if prop.items is None:
                raise UnsupportedSchemaTypeError('array', f"array property {name} has no items")
            t = self.compile_schema(ctx, scope, type_name, prop.items.copy(description=''))
            if self.wrap_primitives:
                t = boxed(t)
        else:
            if prop.enum:
                t = self.compile_enum(ctx, scope, scope[-1].name + '_' + name, prop.enum)
            else:
                t = ctx.registry.lookup(prop.first_type, scope)
                if t is None:
                    t = self.compile_schema(ctx, scope, type_name, prop)
            t = self.apply_builtin_format(t, prop.format)
            if self.wrap_primitives:
                t = boxed(t)

        if isinstance(t, Parameter):
            name = t.parameter_name
            number = t.number
            repeated = t.repeated
            t = t.type
        else:
            if prop.proto_name:
                name = prop.proto_name
            number = prop.proto_tag
            repeated = 'array' in prop.type

        if isinstance(t, (Message, Enum)):
            ctx.registry.register(t, scope[-1], scope)
        return name, t, number, repeated

    @staticmethod
    def apply_builtin_format(t: ProtoType, fmt: str) -> ProtoType:
        """Map OpenAPI primitive placeholders to protobuf scalars according to the format."""
        if not isinstance(t, Builtin):
            return t
        if t.name == 'bytes':
            return BYTES
        if t.name == 'pseudo:boolean':
            return BOOL
        if t.name == 'string':
            return BYTES if fmt == 'byte' else STRING
        if t.name == 'pseudo:integer':
            return INT64 if fmt == 'int64' else INT32
        if t.name == 'pseudo:float':
            return FLOAT
        if t.name == 'pseudo:number':
            if fmt in ('', 'double'):
                return DOUBLE
            if fmt in ('int64', 'long'):
                return INT64
            if fmt in ('integer', 'int32'):
                return INT32
            return FLOAT
        return t

    def compile_parameter_to_schema(self, ctx: CompilationContext, param: OpenApiParameter) -> Tuple[str, Schema]:
        """Turn a parameter into the schema of one request message property."""
        if param.ref:
            ctx.get_type_from_reference(param.ref)
            name = param.name or param.ref.rsplit('/', 1)[-1]
            return snake(name), Schema(ref=param.ref, proto_name=snake(name))
        if param.schema is not None:
            return snake(param.name), param.schema.copy(
                proto_name=snake(param.name),
                description=param.description,
                proto_tag=param.proto_tag or param.schema.proto_tag)
        return snake(param.name), Schema(
            type=list(param.type),
            enum=list(param.enum),
            format=param.format,
            items=param.items,
            proto_name=snake(param.name),
            proto_tag=param.proto_tag,
            description=param.description)

    def compile_parameters_to_schema(self, ctx: CompilationContext, params: List[OpenApiParameter]) -> Schema:
        """Merge an endpoint's parameters into one object schema."""
        schema = Schema()
        for param in params:
            try:
                name, prop = self.compile_parameter_to_schema(ctx, param)
            except ProtoizeError as e:
                raise e.wrap(f"failed to compile parameter {param.name or param.ref}")
            schema.properties[name] = prop
        return schema

    def compile_paths(self, ctx: CompilationContext, scope: Scope, paths: Dict[str, Path]) -> None:
        for path in sorted(paths):
            try:
                self.compile_path(ctx, scope, path, paths[path])
            except ProtoizeError as e:
                raise e.wrap(f"failed to compile path {path}")

    def compile_path(self, ctx: CompilationContext, scope: Scope, path: str, item: Path) -> None:
        """Compile every operation of a path into an RPC with its request and response messages."""
        for endpoint in item.operations():
            name = endpoint_name(endpoint.verb, path, endpoint.operation_id)
            rpc = RPC(name, comment=make_comment(endpoint.summary, endpoint.description), deprecated=endpoint.deprecated)

            # one request message per rpc, so path and operation parameters are merged
            params = item.parameters + endpoint.parameters
            if params:
                request_name = name + 'Request'
                request_schema = self.compile_parameters_to_schema(ctx, params)
                try:
                    request = self.compile_schema(ctx, scope, request_name, request_schema)
                except ProtoizeError as e:
                    raise e.wrap(f"failed to compile parameters for {name}")
                if not is_message(request):
                    raise RequestShapeError(request_name, type(request).__name__, name)
                ctx.registry.register(request, scope[-1], scope)
                rpc.parameter = request

            response = self.compile_response(ctx, scope, name, endpoint.responses)
            if response is not None:
                rpc.response = response

            if self.annotate:
                rpc.add_option(self.http_annotation(ctx, endpoint.verb, path, params))

            for option_name, option_value in endpoint.custom_options.items():
                rpc.add_option(RPCOption(option_name, option_value))

            ctx.add_rpc(rpc)

    def compile_response(self, ctx: CompilationContext, scope: Scope, name: str, responses) -> Optional[Message | Builtin]:
        """
        Compile the response message of an endpoint from its 200 or 201 response.

        Other status codes are not consulted. An array response becomes a
        message with a single repeated `items` field.
        """
        for code in RESPONSE_CODES:
            response = responses.get(code)
            if response is None or response.schema is None:
                continue
            response_name = name + 'Response'
            schema = response.schema
            items = self._array_items(ctx, schema)
            if items is not None:
                try:
                    t = unwrap(self.compile_schema(ctx, scope, response_name + 'Item', items.copy(description='')))
                except ProtoizeError as e:
                    raise e.wrap(f"failed to compile array response for {name}")
                result = Message(response_name)
                result.add_field(Field(t, 'items', 1, repeated=True))
                ctx.add_import_for_type(t.name)
            else:
                try:
                    result = unwrap(self.compile_schema(ctx, scope, response_name, schema))
                except ProtoizeError as e:
                    raise e.wrap(f"failed to compile response for {name}")
            if not is_message(result):
                raise ResponseShapeError(response_name, type(result).__name__, name)
            ctx.registry.register(result, scope[-1], scope)
            return result
        return None

    def _array_items(self, ctx: CompilationContext, schema: Schema) -> Optional[Schema]:
        """The item schema if `schema` is an array, directly or through a reference to a named array schema."""
        if schema.items is not None and (not schema.type or 'array' in schema.type):
            return schema.items
        prefix = ctx.spec.definitions_prefix
        if schema.ref.startswith(prefix):
            target = ctx.spec.definitions.get(schema.ref[len(prefix):])
            if target is not None and 'array' in target.type and target.items is not None:
                return target.items
        return None

    def http_annotation(self, ctx: CompilationContext, verb: str, path: str, params: List[OpenApiParameter]) -> HTTPAnnotation:
        body = ''
        for param in params:
            effective = self._global_parameter(ctx, param) or param
            if effective.location == 'body':
                body = effective.name or param.name
                break
        annotation_path = path
        if ctx.spec.base_path:
            annotation_path = ctx.spec.base_path.rstrip('/') + '/' + path.lstrip('/')
        return HTTPAnnotation(verb, annotation_path, body)

    def _global_parameter(self, ctx: CompilationContext, param: OpenApiParameter) -> Optional[OpenApiParameter]:
        prefix = ctx.spec.parameters_prefix
        if param.ref.startswith(prefix):
            return ctx.spec.parameters.get(param.ref[len(prefix):])
        return None


def assign_field_numbers(message_name: str, fields: List[Tuple[str, int]]) -> List[int]:
    """
    Assign field numbers to (name, explicit number) pairs. 0 means unassigned.

    Explicit numbers are honored and must be unique. Unassigned fields receive
    the smallest free positive numbers, in name order, then input order.
    The result is parallel to `fields`, so entries sharing a name get numbers
    of their own.
    """
    taken: Dict[int, str] = {}
    numbers = [0] * len(fields)
    explicit = sorted((number, name, i) for i, (name, number) in enumerate(fields) if number != 0)
    for number, name, i in explicit:
        if number < 0:
            raise ProtoizeError(f"field {name} of {message_name} has invalid number {number}")
        if number in taken:
            raise DuplicateFieldNumberError(message_name, number, [taken[number], name])
        taken[number] = name
        numbers[i] = number
    serial = 1
    for name, i in sorted((name, i) for i, (name, number) in enumerate(fields) if number == 0):
        while serial in taken:
            serial += 1
        taken[serial] = name
        numbers[i] = serial
    return numbers


def convert_openapi_to_proto(openapi_file_path: str, proto_file_path: str, annotate: bool = False, skip_rpcs: bool = False,
                             namespace_enums: bool = False, wrap_primitives: bool = False, indent: int = 4) -> str:
    """
    Convert an OpenAPI document to a .proto file.

    Args:
        openapi_file_path: Path or URL of the OpenAPI document (JSON or YAML).
        proto_file_path: The .proto file to write. Nothing is written if empty.
        annotate: Emit google.api.http options for gRPC-gateway.
        skip_rpcs: Only emit messages and enums.
        namespace_enums: Prefix all enum values with their enum name.
        wrap_primitives: Use wrapper messages for scalar fields.
        indent: Number of spaces per indentation level.

    Returns:
        The generated .proto text.
    """
    if not openapi_file_path:
        raise ValueError("OpenAPI file path is required")
    spec = load_openapi(openapi_file_path)
    converter = OpenApiToProto()
    converter.annotate = annotate
    converter.skip_rpcs = skip_rpcs
    converter.prefix_enums = namespace_enums
    converter.wrap_primitives = wrap_primitives
    if proto_file_path:
        converter.default_package = package_name(os.path.splitext(os.path.basename(proto_file_path))[0]) or 'openapi'
    package = converter.compile_openapi(spec)
    proto = ProtoEncoder(' ' * indent).encode(package)
    if proto_file_path:
        directory = os.path.dirname(proto_file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)
        with open(proto_file_path, 'w', encoding='utf-8') as file:
            file.write(proto)
    return proto
