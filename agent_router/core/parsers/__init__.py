"""Format parsers for declarative context files"""

from pathlib import Path
from typing import List, Optional, Union

from .base import BaseFormatParser, ParseResult
from .json_parser import JSONParser
from .yaml_parser import YAMLParser
from .toml_parser import TOMLParser

PARSERS: List[BaseFormatParser] = [JSONParser(), YAMLParser(), TOMLParser()]

SUPPORTED_EXTENSIONS = frozenset(ext for parser in PARSERS for ext in parser.extensions)


def get_parser(path: Union[str, Path]) -> Optional[BaseFormatParser]:
    """Pick the parser for a file by its extension, or None if unrecognized"""
    for parser in PARSERS:
        if parser.can_parse(path):
            return parser
    return None


__all__ = [
    "BaseFormatParser",
    "ParseResult",
    "JSONParser",
    "YAMLParser",
    "TOMLParser",
    "PARSERS",
    "SUPPORTED_EXTENSIONS",
    "get_parser",
]
