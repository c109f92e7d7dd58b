"""TOML context file parser"""

from typing import Any, Tuple

import toml

from .base import BaseFormatParser


class TOMLParser(BaseFormatParser):
    """Parser for .toml context files"""

    @property
    def format_name(self) -> str:
        return "toml"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".toml",)

    def loads(self, text: str) -> Any:
        return toml.loads(text)
