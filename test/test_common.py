""" Test the naming helpers """

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from protoize.common import (all_caps, concat_spaces, dedupe, endpoint_name, looks_like_integer, make_comment,
                             normalize_enum_name, normalize_field_name, operation_id_name, package_name, pascal,
                             query_unescape, service_name, snake)


class TestNaming(unittest.TestCase):
    """ Test case conversion and name derivation """

    def test_snake(self):
        """ Test snake_case conversion """
        self.assertEqual(snake('fooBar'), 'foo_bar')
        self.assertEqual(snake('FooBar'), 'foo_bar')
        self.assertEqual(snake('HTTPServer'), 'http_server')
        self.assertEqual(snake('petId'), 'pet_id')
        self.assertEqual(snake('foo-bar baz'), 'foo_bar_baz')
        self.assertEqual(snake('__foo__bar__'), 'foo_bar')
        self.assertEqual(snake('ID'), 'id')

    def test_pascal(self):
        """ Test PascalCase conversion """
        self.assertEqual(pascal('foo_barBaz'), 'FooBarBaz')
        self.assertEqual(pascal('pets by name'), 'PetsByName')
        self.assertEqual(pascal('Pet'), 'Pet')
        self.assertEqual(pascal('x-rate.limit'), 'XRateLimit')

    def test_all_caps(self):
        self.assertEqual(all_caps('a-b c'), 'A_B_C')

    def test_normalize_field_name(self):
        self.assertEqual(normalize_field_name('foo--bar'), 'foo_bar')
        self.assertEqual(normalize_field_name('a.b/c'), 'a_b_c')

    def test_dedupe(self):
        self.assertEqual(dedupe('a__b___c', '_'), 'a_b_c')

    def test_package_and_service_name(self):
        """ Test names derived from the document title """
        self.assertEqual(package_name('Pet Store'), 'petstore')
        self.assertEqual(package_name('my-api'), 'my_api')
        self.assertEqual(service_name('Pet Store'), 'PetStoreService')
        self.assertEqual(service_name('pets'), 'PetsService')
        self.assertEqual(concat_spaces('pet  store api', True), 'PetStoreApi')

    def test_endpoint_name(self):
        """ Test RPC names derived from verb and path """
        self.assertEqual(endpoint_name('get', '/queue/{id}/enqueue_player'), 'GetQueueIdEnqueuePlayer')
        self.assertEqual(endpoint_name('get', '/pets/{id}'), 'GetPetsId')
        self.assertEqual(endpoint_name('delete', '/pets/{petId}'), 'DeletePetsPetId')
        self.assertEqual(endpoint_name('get', '/pets.json'), 'GetPets')
        self.assertEqual(endpoint_name('get', '/search?q=1'), 'GetSearch')
        self.assertEqual(endpoint_name('post', '/pets', 'createPet'), 'CreatePet')

    def test_operation_id_name(self):
        self.assertEqual(operation_id_name('listPets'), 'ListPets')
        self.assertEqual(operation_id_name('get-user-by-id'), 'GetUserById')

    def test_normalize_enum_name(self):
        """ Test enum value normalization """
        self.assertEqual(normalize_enum_name('N.Y.%20%2F%20Region'), 'NY_REGION')
        self.assertEqual(normalize_enum_name('foo & bar'), 'FOO_AND_BAR')
        self.assertEqual(normalize_enum_name('available'), 'AVAILABLE')
        self.assertEqual(normalize_enum_name('inProgress'), 'IN_PROGRESS')
        # malformed escapes are left alone
        self.assertEqual(normalize_enum_name('100%'), '100')

    def test_query_unescape(self):
        self.assertEqual(query_unescape('a+b%20c'), 'a b c')
        self.assertIsNone(query_unescape('a%2'))
        self.assertIsNone(query_unescape('50%off'))

    def test_looks_like_integer(self):
        self.assertTrue(looks_like_integer('123'))
        self.assertFalse(looks_like_integer('12a'))
        self.assertFalse(looks_like_integer('-1'))

    def test_make_comment(self):
        self.assertEqual(make_comment('Summary', 'Description'), 'Summary\n\nDescription')
        self.assertEqual(make_comment('', '  only description '), 'only description')
        self.assertEqual(make_comment('', ''), '')


if __name__ == '__main__':
    unittest.main()
