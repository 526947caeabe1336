""" Test printing of compiled packages as .proto text """

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from protoize.protoencoder import ProtoEncoder, prefix_lines, stringify
from protoize.protomodel import (EMPTY, STRING, RPC, Enum, Extension, ExtensionField, Field, GlobalOption,
                                 HTTPAnnotation, Message, Package, RPCOption, Service)


def make_package():
    """ A package with an enum, a commented message and an empty service """
    package = Package('demo')
    package.add_type(Service('DemoService'))
    item = Message('Item', comment='An item')
    color = Enum('Color', ['RED', 'GREEN'])
    item.add_field(Field(color, 'colors', 2, repeated=True, comment='Colors\nof the item'))
    item.add_field(Field(STRING, 'name', 1))
    package.add_type(item)
    package.add_type(color)
    package.add_import('google/protobuf/wrappers.proto')
    package.add_option(GlobalOption('go_package', 'example.com/demo'))
    return package


class TestProtoEncoder(unittest.TestCase):
    """ Test the proto3 printer """

    def test_encode_package(self):
        """ Declarations are ordered enums first, then messages; empty services are omitted """
        expected = (
            'syntax = "proto3";\n'
            '\n'
            'package demo;\n'
            '\n'
            'import "google/protobuf/wrappers.proto";\n'
            '\n'
            'option go_package = "example.com/demo";\n'
            '\n'
            'enum Color {\n'
            '    RED = 0;\n'
            '    GREEN = 1;\n'
            '}\n'
            '\n'
            '// An item\n'
            'message Item {\n'
            '    string name = 1;\n'
            '\n'
            '    // Colors\n'
            '    // of the item\n'
            '    repeated Color colors = 2;\n'
            '}\n'
        )
        self.assertEqual(ProtoEncoder().encode(make_package()), expected)

    def test_indent(self):
        """ Test a custom indentation width """
        package = Package('demo')
        message = Message('Outer')
        message.add_type(Message('Inner', [Field(STRING, 'value', 1)]))
        message.add_field(Field(STRING, 'id', 1))
        package.add_type(message)
        proto = ProtoEncoder('  ').encode(package)
        self.assertIn('message Outer {\n  message Inner {\n    string value = 1;\n  }\n\n  string id = 1;\n}', proto)

    def test_encode_rpc_options(self):
        """ The HTTP annotation comes first, then deprecation, then custom options by name """
        rpc = RPC('GetThing', comment='Gets a thing', deprecated=True)
        rpc.add_option(RPCOption('z.ttl', 1.5))
        rpc.add_option(HTTPAnnotation('post', '/v1/things', 'thing'))
        rpc.add_option(RPCOption('a.cached', True))
        text = ProtoEncoder().encode_rpc(rpc)
        self.assertEqual(text, (
            '\n// Gets a thing'
            '\nrpc GetThing(google.protobuf.Empty) returns (google.protobuf.Empty) {'
            '\n    option (google.api.http) = {'
            '\n        post: "/v1/things"'
            '\n        body: "thing"'
            '\n    };'
            '\n    option deprecated = true;'
            '\n    option (a.cached) = true;'
            '\n    option (z.ttl) = 1.5;'
            '\n}'))

    def test_encode_service(self):
        service = Service('DemoService')
        service.add_rpc(RPC('B'))
        service.add_rpc(RPC('A', parameter=EMPTY))
        text = ProtoEncoder().encode_service(service)
        self.assertEqual(text, (
            '\nservice DemoService {'
            '\n    rpc A(google.protobuf.Empty) returns (google.protobuf.Empty) {}'
            '\n'
            '\n    rpc B(google.protobuf.Empty) returns (google.protobuf.Empty) {}'
            '\n}'))
        self.assertEqual(ProtoEncoder().encode_service(Service('Nothing')), '')

    def test_encode_extension(self):
        extension = Extension('google.protobuf.MethodOptions')
        extension.add_field(ExtensionField('cache_ttl', 'int32', 50001))
        self.assertEqual(ProtoEncoder().encode_extension(extension),
                         '\nextend google.protobuf.MethodOptions {\n    int32 cache_ttl = 50001;\n}')

    def test_stringify(self):
        """ Test option value literals """
        self.assertEqual(stringify(True), 'true')
        self.assertEqual(stringify(False), 'false')
        self.assertEqual(stringify('x "y"'), '"x \\"y\\""')
        self.assertEqual(stringify(60), '60')
        self.assertEqual(stringify(2.0), '2')
        self.assertEqual(stringify(0.25), '0.25')
        self.assertEqual(stringify(None), '(invalid)')

    def test_prefix_lines(self):
        self.assertEqual(prefix_lines('a\n\nb\n', '> ', False), '> a\n\n> b')
        self.assertEqual(prefix_lines('a\n\nb', '// ', True), '// a\n// \n// b')
        self.assertEqual(prefix_lines('', '// ', True), '')

    def test_comment_blank_lines(self):
        """ Blank comment lines carry no trailing space """
        encoder = ProtoEncoder()
        self.assertEqual(encoder.comment('Summary\n\nDetails'), '// Summary\n//\n// Details')
        self.assertEqual(encoder.comment(''), '')


if __name__ == '__main__':
    unittest.main()
