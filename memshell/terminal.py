#!/usr/bin/env python3
"""
Terminal front end for memshell.

This module owns the session state the command core is defined against:
the current filesystem snapshot, the working directory, the scrollback
and the command history. It applies each ``CommandResult`` wholesale and
handles ``clear`` itself.

Design Principles:
- The executor is stateless; all state lives in the session
- One command in flight at a time
- Snapshots are replaced, never edited
"""

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from . import memfs
from .commands import CommandResult
from .executor import CommandExecutor
from .memfs import FileSystem, Segments
from .resolver import DEFAULT_MODEL, GeminiResolver, api_key_from_env

logger = logging.getLogger(__name__)

WELCOME_LINES = [
    "Welcome to the Linux Web Terminal!",
    "Type 'help' to see a list of locally supported commands.",
]


@dataclass
class TerminalConfig:
    """Configuration for terminal session."""
    user: str = memfs.USER
    hostname: str = memfs.HOSTNAME
    home: Segments = memfs.HOME
    prompt_format: str = '{user}@{hostname}:{cwd}$ '
    enable_colors: bool = True
    history_size: int = 1000
    model: str = DEFAULT_MODEL
    api_key: Optional[str] = field(default_factory=api_key_from_env)


@dataclass
class HistoryItem:
    """One line of scrollback: a submitted command or its output."""
    id: int
    kind: str  # 'command' or 'output'
    text: str
    prompt: Optional[str] = None


class SessionBusyError(RuntimeError):
    """A command was submitted while another one is still running."""


class CommandHistory:
    """
    Submitted command lines, oldest first.

    Consecutive duplicates are collapsed and the list is capped at
    ``max_size``. Once attached to readline, every entry is mirrored
    there so the arrow keys walk this history.
    """

    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self.history: List[str] = []
        self._readline = None

    def add(self, command: str):
        """Record a command line."""
        if not command or not command.strip():
            return
        if self.history and self.history[-1] == command:
            return
        self.history.append(command)
        if len(self.history) > self.max_size:
            self.history = self.history[-self.max_size:]
        if self._readline is not None:
            self._readline.add_history(command)

    def attach(self, readline_module):
        """Make readline navigate this history instead of its own."""
        readline_module.set_auto_history(False)
        readline_module.set_history_length(self.max_size)
        readline_module.clear_history()
        for command in self.history:
            readline_module.add_history(command)
        self._readline = readline_module


class TerminalSession:
    """
    Main terminal session manager.

    Holds the current snapshot and working directory, records scrollback,
    and feeds submitted lines through the executor one at a time.
    """

    def __init__(self, config: Optional[TerminalConfig] = None,
                 executor: Optional[CommandExecutor] = None,
                 filesystem: Optional[FileSystem] = None):
        """Initialize terminal session."""
        self.config = config or TerminalConfig()
        if executor is None:
            executor = CommandExecutor(GeminiResolver(self.config.api_key, self.config.model),
                                       home=self.config.home)
        self.executor = executor
        self.filesystem = filesystem if filesystem is not None else memfs.initial_filesystem()
        self.cwd: Segments = tuple(self.config.home)
        self.history = CommandHistory(self.config.history_size)
        self.scrollback: List[HistoryItem] = []
        self.busy = False
        self._next_id = 0
        for line in WELCOME_LINES:
            self._add_item('output', line)

    def _add_item(self, kind: str, text: str, prompt: Optional[str] = None) -> HistoryItem:
        item = HistoryItem(self._next_id, kind, text, prompt)
        self._next_id += 1
        self.scrollback.append(item)
        return item

    def display_cwd(self) -> str:
        return memfs.display_path(self.cwd, self.config.home)

    def get_prompt(self) -> str:
        """Generate the prompt string."""
        display_cwd = self.display_cwd()
        if self.config.enable_colors:
            # Green for user@host, blue for path
            return (f'\033[32m{self.config.user}@{self.config.hostname}\033[0m:'
                    f'\033[34m{display_cwd}\033[0m$ ')
        return self.config.prompt_format.format(
            user=self.config.user,
            hostname=self.config.hostname,
            cwd=display_cwd,
        )

    def clear(self):
        """Wipe the scrollback."""
        self.scrollback = []
        self._next_id = 0

    def apply(self, result: CommandResult):
        """Replace session state with whatever the command produced."""
        if result.filesystem is not None:
            self.filesystem = result.filesystem
        if result.cwd is not None:
            self.cwd = tuple(result.cwd)

    async def submit(self, command_line: str) -> str:
        """
        Run one command line and return its output text.

        Blank input is ignored. Raises SessionBusyError if a previous
        command has not finished.
        """
        command_line = command_line.strip()
        if not command_line:
            return ''
        if self.busy:
            raise SessionBusyError("a command is already running")

        self._add_item('command', command_line, self.display_cwd())
        self.history.add(command_line)

        if command_line.lower() == 'clear':
            self.clear()
            return ''

        self.busy = True
        try:
            result = await self.executor.execute(command_line, self.filesystem, self.cwd)
        finally:
            self.busy = False

        if result.text:
            self._add_item('output', result.text)
        if result.changes_state:
            self.apply(result)
        return result.text

    def complete(self, line: str) -> str:
        """
        Complete the last word of ``line`` against the current directory.

        A single match is completed with a trailing '/' for directories or
        a space for files; several matches are extended to their longest
        common prefix.
        """
        parts = line.split(' ')
        current = parts.pop()
        if not current:
            return line

        matches = [(name, is_dir) for name, is_dir
                   in memfs.list_children(self.cwd, self.filesystem)
                   if name.startswith(current)]

        if len(matches) == 1:
            name, is_dir = matches[0]
            return ' '.join(parts + [name]) + ('/' if is_dir else ' ')
        if len(matches) > 1:
            prefix = os.path.commonprefix([name for name, _ in matches])
            if len(prefix) > len(current):
                return ' '.join(parts + [prefix])
        return line

    def _readline_completer(self, text: str, state: int) -> Optional[str]:
        import readline

        if state > 0:
            return None
        line = readline.get_line_buffer()
        completed = self.complete(line)
        if completed == line:
            return None
        return completed[len(line) - len(text):]

    def _cancel_pending(self, loop: asyncio.AbstractEventLoop):
        pending = asyncio.all_tasks(loop)
        for task in pending:
            task.cancel()
        if pending:
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))

    def run_interactive(self):
        """Run the interactive REPL loop."""
        try:
            import readline
            readline.set_completer_delims(' ')
            readline.set_completer(self._readline_completer)
            readline.parse_and_bind('tab: complete')
            self.history.attach(readline)
        except ImportError:
            logger.debug("readline unavailable, tab completion and history disabled")

        for item in self.scrollback:
            print(item.text)
        print()

        # One loop for the whole session so the resolver's client stays bound to it
        loop = asyncio.new_event_loop()
        try:
            while True:
                try:
                    command_line = input(self.get_prompt())
                    if command_line.strip().lower() in ('exit', 'quit'):
                        break

                    if command_line.strip().lower() == 'clear':
                        print('\033[2J\033[H', end='')

                    output = loop.run_until_complete(self.submit(command_line))
                    if output:
                        print(output)

                except KeyboardInterrupt:
                    print("^C")
                    self._cancel_pending(loop)
                    continue
                except EOFError:
                    print()
                    break
        finally:
            loop.close()

        print("Goodbye!")

    def run_command(self, command_line: str) -> str:
        """
        Run a single command and return output.

        This method is useful for non-interactive use.
        """
        return asyncio.run(self.submit(command_line))


def main(argv: Optional[List[str]] = None):
    """Main entry point for the terminal."""
    parser = argparse.ArgumentParser(description='memshell - in-memory Linux terminal')
    parser.add_argument('-c', '--command', help='Execute command and exit')
    parser.add_argument('--model', default=DEFAULT_MODEL, help='Model for unrecognized commands')
    parser.add_argument('--no-color', action='store_true', help='Disable coloured prompt')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
        stream=sys.stderr,
    )

    config = TerminalConfig(model=args.model, enable_colors=not args.no_color)
    if not config.api_key:
        logger.info("No Gemini API key found; unrecognized commands will report an error")
    session = TerminalSession(config=config)

    if args.command:
        output = session.run_command(args.command)
        if output:
            print(output)
    else:
        session.run_interactive()


if __name__ == '__main__':
    main()
