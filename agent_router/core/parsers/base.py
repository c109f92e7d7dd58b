"""Base parser interface for declarative context files"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union


@dataclass
class ParseResult:
    """Result from parsing a definition file"""

    success: bool
    data: Optional[Dict[str, Any]] = None
    format_name: str = "unknown"
    error: Optional[str] = None


class BaseFormatParser(ABC):
    """
    Base class for context file parsers.

    Each parser is responsible for:
    1. Declaring which file extensions it handles
    2. Turning file text into a single mapping (one context per file)
    """

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Name of the format this parser handles (e.g., 'json', 'yaml')"""
        pass

    @property
    @abstractmethod
    def extensions(self) -> Tuple[str, ...]:
        """Lower-case file suffixes, including the dot"""
        pass

    @abstractmethod
    def loads(self, text: str) -> Any:
        """Decode text into a Python object. May raise the format's own errors."""
        pass

    def can_parse(self, path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in self.extensions

    def parse(self, text: str) -> ParseResult:
        """
        Parse file text into a mapping.

        Args:
            text: Raw file contents

        Returns:
            ParseResult with the decoded mapping, or an error message
        """
        try:
            parsed = self.loads(text)
        except Exception as e:
            return ParseResult(
                success=False,
                format_name=self.format_name,
                error=f"{self.format_name.upper()} parse error: {e}"
            )

        if not isinstance(parsed, dict):
            return ParseResult(
                success=False,
                format_name=self.format_name,
                error=f"{self.format_name.upper()} parsed to {type(parsed).__name__}, expected mapping"
            )

        return ParseResult(success=True, data=parsed, format_name=self.format_name)
