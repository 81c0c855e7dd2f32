#!/usr/bin/env python3
"""
Command dispatch for memshell.

``CommandExecutor.execute`` is the boundary the session layer talks to:
given a command line, the current snapshot and the working directory it
returns a ``CommandResult``. Built-in commands run synchronously; anything
else is handed to the fallback resolver, which is the only place the call
can suspend.
"""

import logging
import random
from typing import Callable, Dict, Optional
from datetime import datetime

from .command_parser import CommandParser
from .commands import COMMANDS, CommandResult, Handler, ShellContext
from .memfs import HOME, FileSystem, Segments
from .resolver import FallbackResolver, ResolverConfigError, ResolverError

logger = logging.getLogger(__name__)

MISSING_KEY_TEXT = (
    "Error: GEMINI_API_KEY is not configured. AI-powered commands are disabled.\n"
    "Please set the GEMINI_API_KEY environment variable before starting the terminal."
)


class CommandExecutor:
    """
    Executes command lines against a filesystem snapshot.

    The executor holds no session state of its own; every call receives
    the snapshot and working directory to run against, so the same
    executor can serve any number of independent sessions.
    """

    def __init__(self, resolver: Optional[FallbackResolver] = None,
                 commands: Optional[Dict[str, Handler]] = None,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 home: Segments = HOME):
        self.resolver = resolver
        self.commands = commands if commands is not None else COMMANDS
        self.parser = CommandParser()
        self.rng = rng or random.Random()
        self.clock = clock
        self.home = tuple(home)

    def _context(self, filesystem: FileSystem, cwd: Segments) -> ShellContext:
        ctx = ShellContext(filesystem=filesystem, cwd=tuple(cwd),
                           home=self.home, rng=self.rng)
        if self.clock is not None:
            ctx.clock = self.clock
        return ctx

    async def execute(self, command_line: str, filesystem: FileSystem,
                      cwd: Segments) -> CommandResult:
        """Execute a command line and return its result."""
        command = self.parser.parse(command_line)
        if not command.name:
            return CommandResult()

        handler = self.commands.get(command.name)
        if handler is None:
            logger.debug("No built-in for %r, using fallback resolver", command.name)
            return await self._fallback(command.raw)

        logger.debug("Dispatching %s with args %r", command.name, command.args)
        return handler(command, self._context(filesystem, cwd))

    async def _fallback(self, command_line: str) -> CommandResult:
        """Delegate to the resolver, turning every failure into output text."""
        if self.resolver is None:
            return CommandResult(text=MISSING_KEY_TEXT, exit_code=127)

        try:
            text = await self.resolver(command_line)
        except ResolverConfigError as e:
            logger.warning("Fallback resolver is not configured: %s", e)
            return CommandResult(text=MISSING_KEY_TEXT, exit_code=127)
        except ResolverError as e:
            logger.warning("Fallback resolver failed for %r: %s", command_line, e)
            return CommandResult(text=f"Error: {e}", exit_code=1)
        except Exception as e:
            logger.exception("Fallback resolver raised for %r", command_line)
            return CommandResult(text=f"Error: {e}", exit_code=1)

        return CommandResult(text=text)
