""" Loads OpenAPI documents from files or URLs and inlines external references """

import copy
import json
import logging
import os
import urllib.parse
from typing import Any, Dict, Tuple
from urllib.parse import ParseResult, unquote, urlparse

import jsonpointer
import requests
import yaml

from protoize.errors import DocumentLoadError
from protoize.openapimodel import OpenApiSpec

logger = logging.getLogger(__name__)


def is_external_ref(ref: str) -> bool:
    """True for `$ref`s that point into another document."""
    if ref.startswith('google/protobuf/'):
        return False
    return not ref.startswith('#')


def stringify_keys(node: Any) -> Any:
    """Convert mapping keys to strings. YAML decodes keys such as `200:` as integers."""
    if isinstance(node, dict):
        return {_key(k): stringify_keys(v) for k, v in node.items()}
    if isinstance(node, list):
        return [stringify_keys(v) for v in node]
    return node


def _key(key: Any) -> str:
    if isinstance(key, bool):
        return 'true' if key else 'false'
    return key if isinstance(key, str) else str(key)


class OpenApiLoader:
    """
    Reads OpenAPI documents and resolves `$ref`s into other documents.

    Each external `$ref` is replaced by the node it points to. Relative
    references resolve against the location of the document that contains
    them. Fetched documents are cached per URL for the lifetime of the loader.

    Attributes:
        content_cache: Raw text of fetched documents, keyed by URL.
        document_cache: Decoded documents, keyed by URL.
    """

    def __init__(self) -> None:
        self.content_cache: Dict[str, str] = {}
        self.document_cache: Dict[str, Any] = {}

    def fetch_content(self, url: str | ParseResult) -> str:
        """
        Fetches the content from the specified URL.

        Args:
            url (str or ParseResult): The URL to fetch the content from.

        Returns:
            str: The fetched content.

        Raises:
            DocumentLoadError: If the content cannot be fetched or read.
        """
        parsed_url = urlparse(url) if isinstance(url, str) else url
        key = parsed_url.geturl()
        if key in self.content_cache:
            return self.content_cache[key]
        scheme = parsed_url.scheme

        if scheme in ['http', 'https']:
            logger.debug("fetching %s", key)
            try:
                response = requests.get(key, timeout=30)
                response.raise_for_status()
            except requests.RequestException as e:
                raise DocumentLoadError(key, str(e), e) from e
            self.content_cache[key] = response.text
            return response.text
        elif scheme in ['file', '']:
            file_path = unquote(parsed_url.path) if scheme == 'file' else key
            if scheme == 'file' and parsed_url.netloc:
                file_path = parsed_url.netloc + file_path
            if os.name == 'nt' and file_path.startswith('/') and ':' in file_path:
                file_path = file_path[1:]
            try:
                with open(file_path, 'r', encoding='utf-8') as file:
                    text = file.read()
            except OSError as e:
                raise DocumentLoadError(key, e.strerror or str(e), e) from e
            self.content_cache[key] = text
            return text
        raise DocumentLoadError(key, f"unsupported URL scheme '{scheme}'")

    def decode(self, text: str, location: str) -> Any:
        """Decode JSON or YAML, choosing by file extension and trying both otherwise."""
        ext = os.path.splitext(urlparse(location).path)[1].lower()
        try:
            if ext in ['.yaml', '.yml']:
                doc = yaml.safe_load(text)
            elif ext == '.json':
                doc = json.loads(text)
            else:
                try:
                    doc = json.loads(text)
                except json.JSONDecodeError:
                    doc = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise DocumentLoadError(location, f"invalid document: {e}", e) from e
        return stringify_keys(doc)

    def load_document(self, url: str) -> Any:
        if url not in self.document_cache:
            self.document_cache[url] = self.decode(self.fetch_content(url), url)
        return self.document_cache[url]

    def compose_uri(self, base_uri: str, url: str | ParseResult) -> str:
        if isinstance(url, str):
            url = urlparse(url)
        if url.scheme and len(url.scheme) > 1:
            return url.geturl()
        if not url.path and not url.netloc:
            return base_uri
        if base_uri.startswith('file'):
            parsed_file_uri = urlparse(base_uri)
            base_dir = os.path.dirname(unquote(parsed_file_uri.path))
            filename = os.path.normpath(os.path.join(base_dir, unquote(url.path)))
            return f'file://{urllib.parse.quote(filename)}'
        return urllib.parse.urljoin(base_uri, url.geturl())

    def resolve_external(self, node: Any, base_uri: str, stack: Tuple[str, ...] = ()) -> Any:
        """Return a copy of `node` with every external `$ref` replaced by its target."""
        if isinstance(node, list):
            return [self.resolve_external(v, base_uri, stack) for v in node]
        if not isinstance(node, dict):
            return node
        ref = node.get('$ref')
        if isinstance(ref, str) and is_external_ref(ref):
            location, _, fragment = ref.partition('#')
            target_uri = self.compose_uri(base_uri, location)
            key = f"{target_uri}#{fragment}"
            if key in stack:
                raise DocumentLoadError(key, "circular external reference")
            doc = self.load_document(target_uri)
            try:
                target = jsonpointer.resolve_pointer(doc, unquote(fragment)) if fragment else doc
            except jsonpointer.JsonPointerException as e:
                raise DocumentLoadError(key, f"fragment not found: {e}", e) from e
            logger.debug("inlined external reference %s", key)
            return self.resolve_external(copy.deepcopy(target), target_uri, stack + (key,))
        return {k: self.resolve_external(v, base_uri, stack) for k, v in node.items()}

    def load(self, location: str) -> OpenApiSpec:
        """Load and parse an OpenAPI document with all external references inlined."""
        parsed = urlparse(location)
        if parsed.scheme in ['http', 'https', 'file']:
            uri = location
        else:
            uri = 'file://' + urllib.parse.quote(os.path.abspath(location))
        doc = self.resolve_external(self.load_document(uri), uri)
        if not isinstance(doc, dict):
            raise DocumentLoadError(location, "document root must be an object")
        return OpenApiSpec.from_dict(doc)


def load_openapi(location: str) -> OpenApiSpec:
    """Load an OpenAPI document from a file path or an http(s)/file URL."""
    return OpenApiLoader().load(location)


def load_openapi_from_string(text: str, location: str = 'openapi.yaml') -> OpenApiSpec:
    """Parse an OpenAPI document given as text. External references resolve against `location`."""
    loader = OpenApiLoader()
    uri = location if urlparse(location).scheme in ['http', 'https', 'file'] else \
        'file://' + urllib.parse.quote(os.path.abspath(location))
    doc = loader.resolve_external(loader.decode(text, uri), uri)
    if not isinstance(doc, dict):
        raise DocumentLoadError(location, "document root must be an object")
    return OpenApiSpec.from_dict(doc)
