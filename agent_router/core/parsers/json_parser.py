"""JSON context file parser"""

import json
from typing import Any, Tuple

from .base import BaseFormatParser


class JSONParser(BaseFormatParser):
    """Parser for .json context files"""

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".json",)

    def loads(self, text: str) -> Any:
        return json.loads(text)
