import json
from typing import Any, Dict, Union

from .utils import canonical_json


class Note:
    """Represents a single stored note."""

    def __init__(self, name: str, text: str):
        self.name = name
        self.text = text

    def to_dict(self) -> Dict[str, str]:
        """Convert note to its wire representation."""
        return {
            "name": self.name,
            "text": self.text
        }

    def __eq__(self, other):
        if not isinstance(other, Note):
            return NotImplemented
        return self.name == other.name and self.text == other.text

    def __repr__(self):
        return f"Note(name={self.name!r}, text={self.text!r})"


class NoteError(Exception):
    """Base class for expected note store failures.

    Each subclass carries the HTTP status the web layer answers with.
    """
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(NoteError):
    """A required field is missing or a note name is not usable."""
    status_code = 400


class AlreadyExists(NoteError):
    """Create was attempted on an occupied name."""
    status_code = 400


class NotFound(NoteError):
    """The addressed note does not exist."""
    status_code = 404


class UnsupportedMediaType(NoteError):
    """Replace body declared a content type other than JSON or plain text."""
    status_code = 415


class StructuredPayload:
    """A JSON object or array submitted as note content."""

    def __init__(self, value: Any):
        self.value = value

    def to_text(self) -> str:
        return canonical_json(self.value)


class TextPayload:
    """Plain text submitted as note content, stored verbatim."""

    def __init__(self, text: str):
        self.text = text

    def to_text(self) -> str:
        return self.text


Payload = Union[StructuredPayload, TextPayload]

JSON_MEDIA_TYPE = "application/json"
TEXT_MEDIA_TYPE = "text/plain"


def media_type_of(content_type: str) -> str:
    """Strip parameters from a Content-Type header value."""
    return content_type.split(";", 1)[0].strip().lower()


def charset_of(content_type: str, default: str = "utf-8") -> str:
    for param in content_type.split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return default


def _reject_constant(token: str):
    raise InvalidInput(f"Invalid JSON body: unexpected token {token}")


def resolve_payload(content_type: str, body: bytes) -> Payload:
    """Turn a raw request body into a payload variant.

    Args:
        content_type (str): Content-Type header as sent by the client (may be empty)
        body (bytes): Raw request body

    Returns:
        Payload: StructuredPayload for JSON bodies, TextPayload for plain text

    Raises:
        UnsupportedMediaType: If the body is neither JSON nor plain text
        InvalidInput: If a JSON body is malformed or not an object/array
    """
    media_type = media_type_of(content_type or "")

    if media_type == JSON_MEDIA_TYPE:
        try:
            value = json.loads(body.decode(charset_of(content_type)), parse_constant=_reject_constant)
        except (UnicodeDecodeError, LookupError, ValueError) as e:
            raise InvalidInput(f"Invalid JSON body: {e}")
        if not isinstance(value, (dict, list)):
            raise InvalidInput("JSON body must be an object or an array")
        return StructuredPayload(value)

    if media_type == TEXT_MEDIA_TYPE:
        try:
            return TextPayload(body.decode(charset_of(content_type)))
        except (UnicodeDecodeError, LookupError) as e:
            raise InvalidInput(f"Cannot decode text body: {e}")

    raise UnsupportedMediaType("Unsupported Media Type")
