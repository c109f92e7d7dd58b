"""YAML context file parser"""

from typing import Any, Tuple

import yaml

from .base import BaseFormatParser


class YAMLParser(BaseFormatParser):
    """Parser for .yaml / .yml context files"""

    @property
    def format_name(self) -> str:
        return "yaml"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".yaml", ".yml")

    def loads(self, text: str) -> Any:
        # safe_load only; context files never carry Python tags
        return yaml.safe_load(text)
