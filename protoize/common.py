""" Naming helpers shared by the OpenAPI to Protobuf converter """

# pylint: disable=line-too-long

import re
from urllib.parse import unquote_plus


def is_alnum(ch: str) -> bool:
    """ ASCII-only alphanumeric check. Non-ASCII letters count as punctuation. """
    return ('A' <= ch <= 'Z') or ('a' <= ch <= 'z') or ('0' <= ch <= '9')


def all_caps(string: str) -> str:
    """ Upper-case a string, replacing every non-alphanumeric character with an underscore. """
    return ''.join(ch.upper() if is_alnum(ch) else '_' for ch in string)


def normalize_field_name(string: str) -> str:
    """ Collapse every run of non-alphanumeric characters into a single underscore. """
    result = []
    was_underscore = False
    for ch in string:
        if not is_alnum(ch):
            if not was_underscore:
                result.append('_')
            was_underscore = True
            continue
        was_underscore = False
        result.append(ch)
    return ''.join(result)


def dedupe(string: str, target: str) -> str:
    """ Collapse consecutive occurrences of `target` into one. """
    result = []
    was_target = False
    for ch in string:
        if ch == target:
            if not was_target:
                result.append(ch)
                was_target = True
            continue
        was_target = False
        result.append(ch)
    return ''.join(result)


def remove_non_alnum(string: str) -> str:
    """ Turn '_', '-' and ' ' into underscores and drop every other non-alphanumeric character. """
    result = []
    for ch in string:
        if not is_alnum(ch):
            if ch in '_- ':
                ch = '_'
            else:
                continue
        result.append(ch)
    return ''.join(result)


def snake(string: str) -> str:
    """
    Convert a string to snake_case.

    Separators and punctuation are reduced to single underscores, leading and
    trailing underscores are dropped, and a break is inserted before every
    upper-case letter that starts a word. In a run of upper-case letters the
    break goes before the last letter of the run when it starts a new
    lower-case word, so 'HTTPServer' becomes 'http_server'.

    Args:
        string (str): The string to convert.

    Returns:
        str: The string in snake_case.
    """
    chars = list(dedupe(remove_non_alnum(string), '_').strip('_'))
    result = []
    was_upper = 0
    was_underscore = False
    for i, ch in enumerate(chars):
        if not is_alnum(ch):
            if not was_underscore:
                result.append('_')
                was_underscore = True
            continue
        if ch.isupper():
            if was_upper == 0 and result and not was_underscore:
                result.append('_')
            was_upper += 1
        else:
            if was_upper > 1 and len(result) != 1:
                if chars[i-2] != '_' and chars[i-1] != '_':
                    # move the last upper-case letter into the new word
                    result.pop()
                    result.append('_')
                    result.append(chars[i-1].lower())
            was_upper = 0
        was_underscore = False
        result.append(ch.lower())
    return ''.join(result)


def pascal(string: str) -> str:
    """
    Convert a string to PascalCase.

    Non-alphanumeric characters act as word breaks and are removed. The first
    character and every character following a break is upper-cased, the rest
    keep their case, so 'foo_barBaz' becomes 'FooBarBaz'.

    Args:
        string (str): The string to convert.

    Returns:
        str: The string in PascalCase.
    """
    result = []
    first = True
    was_break = False
    for ch in string:
        if not is_alnum(ch):
            was_break = True
            continue
        if first or was_break:
            ch = ch.upper()
        first = False
        was_break = False
        result.append(ch)
    return ''.join(result)


def concat_spaces(string: str, title: bool) -> str:
    """ Remove whitespace, upper-casing the first character and, if `title` is set, each word start. """
    result = []
    was_space = False
    for i, ch in enumerate(string):
        if ch.isspace():
            was_space = True
            continue
        if i == 0 or (was_space and title):
            ch = ch.upper()
        result.append(ch)
        was_space = False
    return ''.join(result)


def clean_characters(string: str) -> str:
    """ Replace every non-alphanumeric character with an underscore. """
    return ''.join(ch if is_alnum(ch) else '_' for ch in string)


def package_name(title: str) -> str:
    """ Derive the proto package name from the document title, e.g. 'Pet Store' -> 'petstore'. """
    return clean_characters(concat_spaces(title, False).lower())


def service_name(title: str) -> str:
    """ Derive the service name from the document title, e.g. 'Pet Store' -> 'PetStoreService'. """
    return pascal(concat_spaces(title, True) + 'Service')


def looks_like_integer(string: str) -> bool:
    """ True if the string consists only of ASCII digits. """
    return all('0' <= ch <= '9' for ch in string)


_invalid_escape = re.compile(r'%(?![0-9A-Fa-f]{2})')


def query_unescape(string: str) -> str | None:
    """ Decode a query-string escaped value. Returns None if it contains a malformed escape. """
    if _invalid_escape.search(string):
        return None
    return unquote_plus(string)


def normalize_enum_name(string: str) -> str:
    """
    Normalize an enum value into a proto identifier.

    '&' reads as 'AND', percent escapes are decoded when well formed, and the
    result is snake cased and upper-cased: 'N.Y.%20%2F%20Region' becomes
    'NY_REGION' and 'foo & bar' becomes 'FOO_AND_BAR'.
    """
    string = string.replace('&', ' AND ')
    unescaped = query_unescape(string)
    if unescaped is not None:
        string = unescaped
    return all_caps(snake(string))


def operation_id_name(operation_id: str) -> str:
    """ Convert an operationId into an RPC name. """
    return pascal(snake(operation_id))


def endpoint_name(verb: str, path: str, operation_id: str = '') -> str:
    """
    Derive the RPC name for an endpoint.

    The operationId wins if present. Otherwise the name is built from the
    verb and the path template: file extensions and query strings are
    stripped, separators turn into word breaks and brackets are dropped,
    so GET /queue/{id}/enqueue_player becomes 'GetQueueIdEnqueuePlayer'.

    Args:
        verb (str): The HTTP verb, lower case.
        path (str): The path template.
        operation_id (str): The operationId of the endpoint, if any.

    Returns:
        str: The RPC name.
    """
    if operation_id:
        return operation_id_name(operation_id)
    last_segment = path.rsplit('/', 1)[-1]
    dot = last_segment.rfind('.')
    if dot >= 0:
        path = path[:len(path) - (len(last_segment) - dot)]
    query = path.rfind('?')
    if query > 0:
        path = path[:query]
    cleaned = []
    for ch in path:
        if ch in '_-./':
            ch = ' '
        elif ch in '{}[]()':
            continue
        cleaned.append(ch)
    return pascal(verb) + pascal(''.join(cleaned))


def make_comment(summary: str, description: str) -> str:
    """ Join a summary and a description into one comment, separated by a blank line. """
    parts = [part for part in (summary.strip(), description.strip()) if part]
    return '\n\n'.join(parts)
