""" Test forward reference resolution """

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from protoize.errors import UnresolvedReferenceError
from protoize.protomodel import RPC, STRING, Field, Map, Message, Package, Reference, Service
from protoize.refresolver import find_unresolved_references, resolve_reference, resolve_references


class TestReferenceResolver(unittest.TestCase):
    """ Test splicing resolved types in place of placeholders """

    def test_resolve_fields_and_map_values(self):
        pet = Message('Pet', [Field(STRING, 'name', 1)])
        owner = Message('Owner')
        owner.add_field(Field(Reference('#/definitions/Pet'), 'pet', 1))
        owner.add_field(Field(Map(STRING, Reference('#/definitions/Pet')), 'pets_by_name', 2))
        package = Package('demo', children=[owner, pet])
        definitions = {'#/definitions/Pet': pet}

        self.assertEqual(find_unresolved_references(package), ['#/definitions/Pet', '#/definitions/Pet'])
        resolve_references(package, definitions.__getitem__)
        self.assertIs(owner.fields[0].type, pet)
        self.assertIs(owner.fields[1].type.value, pet)
        self.assertEqual(find_unresolved_references(package), [])

    def test_self_reference_terminates(self):
        node = Message('Node')
        node.add_field(Field(Reference('#/definitions/Node'), 'next', 1))
        package = Package('demo', children=[node])
        resolve_references(package, {'#/definitions/Node': node}.__getitem__)
        self.assertIs(node.fields[0].type, node)
        # a second pass is a no-op
        resolve_references(package, {}.__getitem__)
        self.assertIs(node.fields[0].type, node)

    def test_nested_messages_are_resolved(self):
        pet = Message('Pet')
        inner = Message('Inner')
        inner.add_field(Field(Reference('#/definitions/Pet'), 'pet', 1))
        outer = Message('Outer', children=[inner])
        package = Package('demo', children=[outer, pet])
        resolve_references(package, {'#/definitions/Pet': pet}.__getitem__)
        self.assertIs(inner.fields[0].type, pet)

    def test_reference_chain(self):
        """ A definition that is only a $ref resolves through to the final type """
        pet = Message('Pet')
        table = {'#/definitions/Alias': Reference('#/definitions/Pet'), '#/definitions/Pet': pet}
        self.assertIs(resolve_reference(Reference('#/definitions/Alias'), table.__getitem__), pet)

    def test_circular_chain_raises(self):
        table = {'#/definitions/A': Reference('#/definitions/B'), '#/definitions/B': Reference('#/definitions/A')}
        with self.assertRaises(UnresolvedReferenceError):
            resolve_reference(Reference('#/definitions/A'), table.__getitem__)

    def test_unresolvable_reference_is_wrapped(self):
        def lookup(ref):
            raise UnresolvedReferenceError(ref)

        owner = Message('Owner')
        owner.add_field(Field(Reference('#/definitions/Missing'), 'missing', 1))
        with self.assertRaises(UnresolvedReferenceError) as cm:
            resolve_references(Package('demo', children=[owner]), lookup)
        self.assertEqual(str(cm.exception),
                         'failed to resolve type of field missing in Owner: reference #/definitions/Missing could not be resolved')

    def test_find_references_in_rpcs(self):
        service = Service('DemoService')
        service.add_rpc(RPC('Get', response=Reference('#/definitions/Pet')))
        package = Package('demo', children=[service])
        self.assertEqual(find_unresolved_references(package), ['#/definitions/Pet'])


if __name__ == '__main__':
    unittest.main()
