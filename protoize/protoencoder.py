""" Prints a compiled Protobuf package as .proto text """

import json
from decimal import Decimal
from typing import Any, List

from protoize.protomodel import (RPC, Enum, Extension, GlobalOption, HTTPAnnotation, Message, Package, RPCOption,
                                 Service, Field)

indent = '    '


def quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def stringify(value: Any) -> str:
    """Render an option value as a proto literal."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), 'f')
    return '(invalid)'


def prefix_lines(text: str, prefix: str, apply_empty_lines: bool) -> str:
    """Prefix each line of `text`. Empty lines stay empty unless `apply_empty_lines` is set."""
    if not text:
        return ''
    lines = text.split('\n')
    if text.endswith('\n'):
        lines = lines[:-1]
    return '\n'.join(prefix + line if line or apply_empty_lines else '' for line in lines)


class ProtoEncoder:
    """
    Encodes a Package into proto3 syntax.

    Declarations are sorted so the output does not depend on the order in
    which types were compiled: enums, messages, extensions and the service,
    each group by name. Message fields are sorted by number and RPCs by name.
    """

    def __init__(self, indent_str: str = indent) -> None:
        self.indent = indent_str

    def encode(self, package: Package) -> str:
        return self.encode_package(package) + '\n'

    def comment(self, text: str) -> str:
        lines = prefix_lines(text, '// ', True).split('\n')
        return '\n'.join('//' if line == '// ' else line for line in lines)

    def write_block(self, name: str, content: str) -> str:
        body = prefix_lines(content, self.indent, False)
        return f"\n{name} {{" + body + ('\n' if body else '') + '}'

    def encode_package(self, package: Package) -> str:
        out = 'syntax = "proto3";'
        out += '\n'
        out += f"\npackage {package.name};"
        if package.imports:
            out += '\n'
            for lib in sorted(package.imports):
                out += f"\nimport {quote(lib)};"
        if package.options:
            out += '\n'
            for option in sorted(package.options, key=lambda o: o.name):
                out += self.encode_global_option(option)
        out += '\n'
        out += self.encode_children(package.children)
        return out

    def encode_global_option(self, option: GlobalOption) -> str:
        return f"\noption {option.name} = {quote(option.value)};"

    def encode_children(self, children: List) -> str:
        ordered = sorted(children, key=lambda c: (c.priority, c.name))
        encoded = (self.encode_type(child) for child in ordered)
        return '\n'.join(text for text in encoded if text)

    def encode_type(self, t) -> str:
        if isinstance(t, Enum):
            return self.encode_enum(t)
        if isinstance(t, Message):
            return self.encode_message(t)
        if isinstance(t, Service):
            return self.encode_service(t)
        if isinstance(t, Extension):
            return self.encode_extension(t)
        raise TypeError(f"cannot encode {type(t).__name__} {t.name}")

    def encode_field(self, f: Field) -> str:
        out = ''
        if f.comment:
            out += '\n' + self.comment(f.comment)
        out += '\n'
        if f.repeated:
            out += 'repeated '
        out += f"{f.type.name} {f.name} = {f.number};"
        return out

    def encode_message(self, message: Message) -> str:
        body = self.encode_children(message.children)
        for i, f in enumerate(sorted(message.fields, key=lambda f: f.number)):
            # blank line before commented fields and between nested types and fields
            if (i > 0 and f.comment) or (i == 0 and body):
                body += '\n'
            body += self.encode_field(f)
        out = ''
        if message.comment:
            out += '\n' + self.comment(message.comment)
        return out + self.write_block('message ' + message.name, body)

    def encode_enum(self, enum: Enum) -> str:
        body = ''.join(f"\n{element} = {i};" for i, element in enumerate(enum.elements))
        out = ''
        if enum.comment:
            out += '\n' + self.comment(enum.comment)
        return out + self.write_block('enum ' + enum.name, body)

    def encode_http_annotation(self, annotation: HTTPAnnotation) -> str:
        body = f"\n{annotation.method}: {quote(annotation.path)}"
        if annotation.body:
            body += f"\nbody: {quote(annotation.body)}"
        return self.write_block('option (google.api.http) =', body) + ';'

    def encode_rpc_option(self, option: HTTPAnnotation | RPCOption) -> str:
        if isinstance(option, HTTPAnnotation):
            return self.encode_http_annotation(option)
        return f"\noption ({option.name}) = {stringify(option.value)};"

    def encode_rpc(self, rpc: RPC) -> str:
        annotations = [o for o in rpc.options if isinstance(o, HTTPAnnotation)]
        others = sorted((o for o in rpc.options if isinstance(o, RPCOption)), key=lambda o: o.name)
        body = ''.join(self.encode_rpc_option(o) for o in annotations)
        if rpc.deprecated:
            body += '\noption deprecated = true;'
        body += ''.join(self.encode_rpc_option(o) for o in others)
        out = ''
        if rpc.comment:
            out += '\n' + self.comment(rpc.comment)
        return out + self.write_block(f"rpc {rpc.name}({rpc.parameter.name}) returns ({rpc.response.name})", body)

    def encode_service(self, service: Service) -> str:
        if not service.rpcs:
            return ''
        body = '\n'.join(self.encode_rpc(rpc) for rpc in sorted(service.rpcs, key=lambda r: r.name))
        return self.write_block('service ' + service.name, body)

    def encode_extension(self, extension: Extension) -> str:
        body = ''.join(f"\n{f.type} {f.name} = {f.number};" for f in extension.fields)
        return self.write_block('extend ' + extension.base, body)
