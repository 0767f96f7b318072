from .document import DocumentModel
from .errors import NotAListError, ParseError, PatchError, SchemaError, SeamError, UnknownFormatError
from .formats import detect_format, get_format, parse, patch_preserving_comments, serialize
from .operations import delete_at_path, get_value_at_path, has_path, move_list_element, set_value_at_path
from .paths import IndexSegment, PropertySegment, make_path, parse_path, path_to_string
from .position import get_path_at_position
from .schema import SchemaResolver
from .settings import Settings, load_settings

__all__ = [
    "DocumentModel",
    "SeamError",
    "ParseError",
    "PatchError",
    "UnknownFormatError",
    "NotAListError",
    "SchemaError",
    "detect_format",
    "get_format",
    "parse",
    "serialize",
    "patch_preserving_comments",
    "get_value_at_path",
    "has_path",
    "set_value_at_path",
    "delete_at_path",
    "move_list_element",
    "PropertySegment",
    "IndexSegment",
    "make_path",
    "parse_path",
    "path_to_string",
    "get_path_at_position",
    "SchemaResolver",
    "Settings",
    "load_settings",
]
