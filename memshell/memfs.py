#!/usr/bin/env python3
"""
memfs - An in-memory hierarchical filesystem built from immutable snapshots.

Core philosophy:
- Every node is a frozen value; a directory never changes after creation
- Writes return a new root, copying only the directories on the write path
- Paths are tuples of segments, resolved and walked by pure functions
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


Segments = Tuple[str, ...]

SEPARATOR = '/'
HOME: Segments = ('home', 'user')
USER = 'user'
HOSTNAME = 'linux'

WELCOME_TEXT = (
    "# Welcome to your Linux Web Terminal!\n"
    "\n"
    "- This is a simulated terminal environment made by @divyansh_ai (on X formally twitter).\n"
    "- Try commands like `ls`, `mkdir test`, `cd Projects`, `touch new_file.txt`, `cat README.md`"
)


@dataclass(frozen=True)
class FileNode:
    """Regular file holding text content."""
    content: str = ""

    def is_dir(self) -> bool:
        return False


@dataclass(frozen=True)
class DirNode:
    """Directory mapping child names to nodes."""
    children: Dict[str, 'Node'] = field(default_factory=dict)

    def is_dir(self) -> bool:
        return True

    def with_child(self, name: str, node: 'Node') -> 'DirNode':
        """Return a new DirNode with an additional (or replaced) child."""
        new_children = dict(self.children)
        new_children[name] = node
        return DirNode(new_children)

    def names(self) -> List[str]:
        return sorted(self.children)


Node = Union[FileNode, DirNode]

# The whole tree is addressed through its root directory.
FileSystem = DirNode


def initial_filesystem() -> FileSystem:
    """Build the seeded tree every new session starts from."""
    user = DirNode({
        'Projects': DirNode(),
        'Documents': DirNode(),
        'README.md': FileNode(WELCOME_TEXT),
    })
    return DirNode({'home': DirNode({'user': user})})


# Path resolution

def resolve(path_text: str, cwd: Segments = ()) -> Segments:
    """
    Turn a user supplied path into normalized absolute segments.

    A leading separator starts from the root, anything else starts from
    ``cwd``. Empty tokens and ``.`` are skipped, ``..`` pops one segment and
    stops at the root. Never fails; existence is checked by ``locate``.
    """
    if path_text.startswith(SEPARATOR):
        normalized: List[str] = []
    else:
        normalized = list(cwd)

    for part in path_text.split(SEPARATOR):
        if part == '' or part == '.':
            continue
        elif part == '..':
            if normalized:
                normalized.pop()
        else:
            normalized.append(part)

    return tuple(normalized)


def format_path(segments: Segments) -> str:
    """Render segments as an absolute path string."""
    return SEPARATOR + SEPARATOR.join(segments)


def display_path(segments: Segments, home: Segments = HOME) -> str:
    """Render segments the way the prompt shows them, abbreviating home to ~."""
    if not segments:
        return SEPARATOR
    if tuple(segments) == tuple(home):
        return '~'
    if home and tuple(segments[:len(home)]) == tuple(home):
        return '~' + format_path(segments[len(home):])
    return format_path(segments)


# Navigation

def locate(segments: Segments, fs: FileSystem) -> Optional[Node]:
    """Walk from the root; return the node at ``segments`` or None."""
    current: Node = fs
    for part in segments:
        if not isinstance(current, DirNode):
            return None
        child = current.children.get(part)
        if child is None:
            return None
        current = child
    return current


def locate_parent(segments: Segments, fs: FileSystem) -> Optional[DirNode]:
    """Return the directory that would hold ``segments[-1]``, or None."""
    if not segments:
        return None
    parent = locate(segments[:-1], fs)
    if isinstance(parent, DirNode):
        return parent
    return None


def list_children(segments: Segments, fs: FileSystem) -> List[Tuple[str, bool]]:
    """List ``(name, is_dir)`` pairs of the directory at ``segments``."""
    node = locate(segments, fs)
    if not isinstance(node, DirNode):
        return []
    return [(name, node.children[name].is_dir()) for name in node.names()]


# Mutation

def insert(fs: FileSystem, segments: Segments, node: Node) -> FileSystem:
    """
    Return a new root with ``node`` stored at ``segments``.

    Only the directories between the root and the new node are copied;
    every other subtree is shared with ``fs``, which is left untouched.
    The parent directory must already exist.
    """
    if not segments:
        raise ValueError("Cannot replace the root directory")

    def rebuild(directory: DirNode, remaining: Segments) -> DirNode:
        name = remaining[0]
        if len(remaining) == 1:
            return directory.with_child(name, node)
        child = directory.children.get(name)
        if not isinstance(child, DirNode):
            raise NotADirectoryError(format_path(segments[:len(segments) - len(remaining) + 1]))
        return directory.with_child(name, rebuild(child, remaining[1:]))

    return rebuild(fs, tuple(segments))
