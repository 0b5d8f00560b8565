import json
import os
from typing import Any

NOTE_SUFFIX = ".txt"
TEMP_PREFIX = "."
MAX_FILENAME_BYTES = 255


def _integral_floats_as_ints(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, dict):
        return {k: _integral_floats_as_ints(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_integral_floats_as_ints(v) for v in value]
    return value


def canonical_json(value: Any) -> str:
    """Serialize a JSON value to compact text, keeping non-ASCII characters.

    Integral floats are written without a fraction (``1.0`` becomes ``1``)
    and NaN or infinities raise ValueError.
    """
    return json.dumps(_integral_floats_as_ints(value), separators=(",", ":"),
                      ensure_ascii=False, allow_nan=False)


def is_valid_name(name: str) -> bool:
    """Return True if the name can be used as a storage key.

    Separators, NUL bytes, dot-prefixed names, names too long for a file
    name and the relative directory entries are rejected so a key always
    names a direct child of the storage directory.
    """
    if not name or name in (".", ".."):
        return False
    if name.startswith(TEMP_PREFIX):
        return False
    if len(name.encode("utf-8", "surrogatepass")) + len(NOTE_SUFFIX) > MAX_FILENAME_BYTES:
        return False
    return not any(c in name for c in ("/", "\\", "\0", os.sep))


def note_path(directory: str, name: str) -> str:
    """Derive the file path holding the note called ``name``."""
    return os.path.join(directory, name + NOTE_SUFFIX)


def note_name(filename: str) -> str:
    """Inverse of note_path for a bare file name."""
    return filename[:-len(NOTE_SUFFIX)]
