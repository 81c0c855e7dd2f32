#!/usr/bin/env python3
"""
Command parser for the memshell terminal.

This module translates a raw command line into a structured ``Command``
that the executor can dispatch on.

Design Principles:
- Single responsibility: Parse commands, don't execute them
- Testable: Pure functions with predictable outputs
"""

from typing import List
from dataclasses import dataclass


@dataclass
class Command:
    """
    Represents a single command with its positional arguments.

    ``name`` is lower-cased for dispatch; ``raw`` keeps the trimmed
    command line exactly as typed for resolvers that need free text.
    """
    name: str
    args: List[str]
    raw: str

    @property
    def text(self) -> str:
        """Arguments re-joined with single spaces."""
        return ' '.join(self.args)

    def arg(self, index: int = 0, default: str = '') -> str:
        """Positional argument at ``index`` or ``default`` when absent."""
        if index < len(self.args):
            return self.args[index]
        return default

    def __str__(self) -> str:
        return ' '.join([self.name] + self.args)


class CommandParser:
    """
    Parser for the terminal's command grammar.

    The grammar is deliberately small: tokens are separated by runs of
    whitespace, the first token names the command (case-insensitively)
    and the rest are positional arguments. There is no quoting, piping
    or redirection.
    """

    def parse(self, command_line: str) -> Command:
        """Parse a command line. Blank input yields a command named ''."""
        raw = command_line.strip()
        tokens = raw.split()
        if not tokens:
            return Command(name='', args=[], raw=raw)
        return Command(name=tokens[0].lower(), args=tokens[1:], raw=raw)
