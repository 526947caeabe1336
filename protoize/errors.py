"""
Exceptions raised while loading OpenAPI documents and compiling them to Protobuf.

Every error carries a stack of context frames. Frames are prepended with
`wrap` as the error travels up through the compiler, so the final message
reads outer-to-inner, for example:

    failed to compile paths: failed to compile path /pets: reference #/definitions/Pet could not be resolved
"""

from typing import List, Optional


class ProtoizeError(Exception):
    """
    Base exception for OpenAPI to Protobuf conversion failures.

    Attributes:
        message: Human-readable error description
        context: Context frames, outermost first
        cause: Optional underlying exception that caused this error
    """

    def __init__(self, message: str, context: Optional[List[str]] = None,
                 cause: Optional[Exception] = None) -> None:
        self.message = message
        self.context: List[str] = list(context) if context else []
        self.cause = cause
        super().__init__(message)

    def wrap(self, context: str) -> 'ProtoizeError':
        """Prepend a context frame and return the same exception for re-raising."""
        self.context.insert(0, context)
        return self

    def __str__(self) -> str:
        return ': '.join(self.context + [self.message])


class UnresolvedReferenceError(ProtoizeError):
    """Raised when a $ref cannot be found outside the forward-reference window."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"reference {ref} could not be resolved")


class UnsupportedSchemaTypeError(ProtoizeError):
    """Raised when a schema's type tag cannot be mapped to a Protobuf type."""

    def __init__(self, type_name: str, message: Optional[str] = None) -> None:
        self.type_name = type_name
        super().__init__(message or f"don't know how to handle schema type '{type_name}'")


class MessageShapeError(ProtoizeError):
    """Raised when a type that must be a message resolved to something else."""

    role = 'message'

    def __init__(self, type_name: str, kind: str, endpoint: str) -> None:
        self.type_name = type_name
        self.kind = kind
        self.endpoint = endpoint
        super().__init__(f"{self.role} type {type_name} for {endpoint} is not a message ({kind})")


class RequestShapeError(MessageShapeError):
    role = 'request'


class ResponseShapeError(MessageShapeError):
    role = 'response'


class DuplicateFieldNumberError(ProtoizeError):
    """Raised when two fields of one message claim the same field number."""

    def __init__(self, message_name: str, number: int, fields: List[str]) -> None:
        self.message_name = message_name
        self.number = number
        self.fields = fields
        super().__init__(f"field number {number} is used more than once in {message_name} ({', '.join(fields)})")


class DocumentLoadError(ProtoizeError):
    """Raised when an OpenAPI document or an externally referenced file cannot be loaded."""

    def __init__(self, location: str, reason: str, cause: Optional[Exception] = None) -> None:
        self.location = location
        super().__init__(f"failed to load {location}: {reason}", cause=cause)
