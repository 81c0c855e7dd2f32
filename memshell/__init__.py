"""
memshell - A simulated Linux terminal over an in-memory filesystem

This package provides an immutable-snapshot virtual filesystem, a small
command interpreter that reads and rewrites it, and a terminal session
that falls back to a generative model for commands it does not know.
"""

__version__ = "0.1.0"

from .memfs import (
    FileSystem,
    FileNode,
    DirNode,
    Node,
    Segments,
    HOME,
    initial_filesystem,
    resolve,
    locate,
    locate_parent,
    insert,
    format_path,
    display_path,
)

from .command_parser import (
    Command,
    CommandParser,
)

from .commands import (
    CommandResult,
    ShellContext,
    COMMANDS,
)

from .executor import (
    CommandExecutor,
)

from .resolver import (
    FallbackResolver,
    GeminiResolver,
    ResolverError,
    ResolverConfigError,
)

from .terminal import (
    TerminalSession,
    TerminalConfig,
    CommandHistory,
    HistoryItem,
    SessionBusyError,
)

__all__ = [
    # Filesystem
    "FileSystem",
    "FileNode",
    "DirNode",
    "Node",
    "Segments",
    "HOME",
    "initial_filesystem",
    "resolve",
    "locate",
    "locate_parent",
    "insert",
    "format_path",
    "display_path",

    # Command parser
    "Command",
    "CommandParser",

    # Commands and dispatch
    "CommandResult",
    "ShellContext",
    "COMMANDS",
    "CommandExecutor",

    # Fallback resolver
    "FallbackResolver",
    "GeminiResolver",
    "ResolverError",
    "ResolverConfigError",

    # Terminal
    "TerminalSession",
    "TerminalConfig",
    "CommandHistory",
    "HistoryItem",
    "SessionBusyError",

    # Version info
    "__version__",
]
