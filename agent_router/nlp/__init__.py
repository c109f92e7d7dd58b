"""Instruction parsing for agents"""

from .instruction_parser import extract_parameters, parse_instruction

__all__ = ["extract_parameters", "parse_instruction"]
