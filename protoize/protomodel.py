"""
In-memory Protobuf v3 type graph produced by the OpenAPI compiler.

The graph is a closed set of node classes: Builtin, Message, Enum, Map and
Reference are field types, while Extension and Service only appear as
declarations of a Package. Every type exposes a `name` and a `priority`;
the priority orders sibling declarations when the package is printed
(enums, then messages, then extensions, then services).

All node classes compare by identity so they can be kept in sets and used
as dictionary keys by the type registry.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from protoize.errors import DuplicateFieldNumberError

PRIORITY_ENUM = 0
PRIORITY_MESSAGE = 1
PRIORITY_EXTENSION = 2
PRIORITY_SERVICE = 3
PRIORITY_NONE = -1


@dataclass(eq=False)
class Builtin:
    """A scalar keyword or a well-known type from the google.protobuf library."""
    name: str
    is_message: bool = False

    @property
    def priority(self) -> int:
        return PRIORITY_NONE


@dataclass(eq=False)
class Reference:
    """Placeholder for a `$ref` that could not be resolved yet."""
    ref: str

    @property
    def name(self) -> str:
        return self.ref

    @property
    def priority(self) -> int:
        return PRIORITY_NONE


@dataclass(eq=False)
class Map:
    """A `map<key, value>` field type. Not a declaration of its own."""
    key: 'ProtoType'
    value: 'ProtoType'

    @property
    def name(self) -> str:
        return f"map<{self.key.name}, {self.value.name}>"

    @property
    def priority(self) -> int:
        return PRIORITY_NONE


@dataclass(eq=False)
class Enum:
    """An enum. Values are numbered 0..N-1 in the order they were added."""
    name: str
    elements: List[str] = field(default_factory=list)
    comment: str = ''

    @property
    def priority(self) -> int:
        return PRIORITY_ENUM

    def add_element(self, element: str) -> None:
        self.elements.append(element)


@dataclass(eq=False)
class Field:
    type: 'ProtoType'
    name: str
    number: int
    repeated: bool = False
    comment: str = ''


@dataclass(eq=False)
class Message:
    """A message with numbered fields and optional nested declarations."""
    name: str
    fields: List[Field] = field(default_factory=list)
    children: List['Declaration'] = field(default_factory=list)
    comment: str = ''

    @property
    def priority(self) -> int:
        return PRIORITY_MESSAGE

    def add_type(self, t: 'Declaration') -> None:
        self.children.append(t)

    def add_field(self, f: Field) -> None:
        """Append a field. Field numbers must be positive and unique within the message."""
        if f.number < 1:
            raise ValueError(f"field {f.name} of {self.name} has invalid number {f.number}")
        for existing in self.fields:
            if existing.number == f.number:
                raise DuplicateFieldNumberError(self.name, f.number, [existing.name, f.name])
        self.fields.append(f)


@dataclass(eq=False)
class ExtensionField:
    name: str
    type: str
    number: int


@dataclass(eq=False)
class Extension:
    """An `extend <base> { ... }` block."""
    base: str
    fields: List[ExtensionField] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.base

    @property
    def priority(self) -> int:
        return PRIORITY_EXTENSION

    def add_field(self, f: ExtensionField) -> None:
        self.fields.append(f)


@dataclass(eq=False)
class HTTPAnnotation:
    """The `google.api.http` option of a gRPC-gateway annotated RPC."""
    method: str
    path: str
    body: str = ''


@dataclass(eq=False)
class RPCOption:
    name: str
    value: Any


@dataclass(eq=False)
class RPC:
    name: str
    parameter: Union['Message', Builtin, None] = None
    response: Union['Message', Builtin, None] = None
    comment: str = ''
    options: List[Union[HTTPAnnotation, RPCOption]] = field(default_factory=list)
    deprecated: bool = False

    def __post_init__(self):
        if self.parameter is None:
            self.parameter = EMPTY
        if self.response is None:
            self.response = EMPTY

    def add_option(self, option: Union[HTTPAnnotation, RPCOption]) -> None:
        self.options.append(option)


@dataclass(eq=False)
class Service:
    name: str
    rpcs: List[RPC] = field(default_factory=list)

    @property
    def priority(self) -> int:
        return PRIORITY_SERVICE

    def add_rpc(self, rpc: RPC) -> None:
        self.rpcs.append(rpc)


@dataclass(eq=False)
class GlobalOption:
    name: str
    value: str


@dataclass(eq=False)
class Package:
    """The root of the graph: one .proto file."""
    name: str
    imports: List[str] = field(default_factory=list)
    options: List[GlobalOption] = field(default_factory=list)
    children: List['Declaration'] = field(default_factory=list)

    @property
    def priority(self) -> int:
        return PRIORITY_NONE

    def add_type(self, t: 'Declaration') -> None:
        self.children.append(t)

    def add_import(self, lib: str) -> None:
        if lib not in self.imports:
            self.imports.append(lib)

    def add_option(self, option: GlobalOption) -> None:
        self.options.append(option)


ProtoType = Union[Builtin, Message, Enum, Map, Reference]
Declaration = Union[Message, Enum, Extension, Service]
Container = Union[Package, Message]

BOOL = Builtin('bool')
BYTES = Builtin('bytes')
DOUBLE = Builtin('double')
FLOAT = Builtin('float')
INT32 = Builtin('int32')
INT64 = Builtin('int64')
STRING = Builtin('string')

# placeholders for OpenAPI primitive types whose protobuf type depends on the format
PSEUDO_INTEGER = Builtin('pseudo:integer')
PSEUDO_FLOAT = Builtin('pseudo:float')
PSEUDO_NUMBER = Builtin('pseudo:number')
PSEUDO_BOOLEAN = Builtin('pseudo:boolean')

ANY = Builtin('google.protobuf.Any', True)
EMPTY = Builtin('google.protobuf.Empty', True)
STRUCT = Builtin('google.protobuf.Struct', True)
LIST_VALUE = Builtin('google.protobuf.ListValue', True)
NULL_VALUE = Builtin('google.protobuf.NullValue')
BOOL_VALUE = Builtin('google.protobuf.BoolValue', True)
BYTES_VALUE = Builtin('google.protobuf.BytesValue', True)
DOUBLE_VALUE = Builtin('google.protobuf.DoubleValue', True)
FLOAT_VALUE = Builtin('google.protobuf.FloatValue', True)
INT32_VALUE = Builtin('google.protobuf.Int32Value', True)
INT64_VALUE = Builtin('google.protobuf.Int64Value', True)
STRING_VALUE = Builtin('google.protobuf.StringValue', True)

BOXED_TYPES: Dict[Builtin, Builtin] = {
    BOOL: BOOL_VALUE,
    BYTES: BYTES_VALUE,
    DOUBLE: DOUBLE_VALUE,
    FLOAT: FLOAT_VALUE,
    INT32: INT32_VALUE,
    INT64: INT64_VALUE,
    STRING: STRING_VALUE,
}

KNOWN_IMPORTS: Dict[str, str] = {
    'google.protobuf.Any': 'google/protobuf/any.proto',
    'google.protobuf.Empty': 'google/protobuf/empty.proto',
    'google.protobuf.NullValue': 'google/protobuf/struct.proto',
    'google.protobuf.MethodOptions': 'google/protobuf/descriptor.proto',
    'google.protobuf.Timestamp': 'google/protobuf/timestamp.proto',
    'google.protobuf.Struct': 'google/protobuf/struct.proto',
    'google.protobuf.ListValue': 'google/protobuf/struct.proto',
}
for _wrapper in ['String', 'Bytes', 'Bool', 'Int64', 'Int32', 'UInt64', 'UInt32', 'Float', 'Double']:
    KNOWN_IMPORTS[f'google.protobuf.{_wrapper}Value'] = 'google/protobuf/wrappers.proto'

_WELL_KNOWN = {t.name: t for t in [ANY, EMPTY, STRUCT, LIST_VALUE, NULL_VALUE, BOOL_VALUE, BYTES_VALUE,
                                   DOUBLE_VALUE, FLOAT_VALUE, INT32_VALUE, INT64_VALUE, STRING_VALUE]}

# `$ref`s of the form "google/protobuf/timestamp.proto#/google.protobuf.Timestamp"
KNOWN_DEFINITIONS: Dict[str, Builtin] = {
    f"{lib}#/{msg}": _WELL_KNOWN.get(msg) or Builtin(msg, msg != 'google.protobuf.NullValue')
    for msg, lib in KNOWN_IMPORTS.items()
}


def boxed(t: 'ProtoType') -> 'ProtoType':
    """Return the wrapper message for a scalar type, or the type itself if it has none."""
    return BOXED_TYPES.get(t, t)


def is_message(t: Any) -> bool:
    return isinstance(t, Message) or (isinstance(t, Builtin) and t.is_message)
