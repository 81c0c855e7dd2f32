#!/usr/bin/env python3
"""
Built-in commands for memshell.

Every handler has the same closed signature: it receives the parsed
``Command`` and a ``ShellContext`` (the snapshot and working directory the
command runs against) and returns a ``CommandResult``. Handlers never edit
the snapshot they are given; a write builds a new root with
``memfs.insert`` and hands it back in the result.

Core Design Principles:
- Errors are output text, never exceptions
- A failed command carries no replacement state
- A static name -> handler table, no reflective lookup
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional

from . import memfs
from .command_parser import Command
from .memfs import DirNode, FileNode, FileSystem, Segments


@dataclass
class CommandResult:
    """
    Represents the result of a command execution.

    ``filesystem`` and ``cwd`` are only set when the command changed them;
    ``None`` means the session keeps what it has.
    """
    text: str = ''
    filesystem: Optional[FileSystem] = None
    cwd: Optional[Segments] = None
    exit_code: int = 0

    @property
    def changes_state(self) -> bool:
        return self.filesystem is not None or self.cwd is not None


@dataclass
class ShellContext:
    """Inputs a handler runs against."""
    filesystem: FileSystem
    cwd: Segments
    home: Segments = memfs.HOME
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], datetime] = field(default=lambda: datetime.now().astimezone())


Handler = Callable[[Command, ShellContext], CommandResult]


def _error(text: str) -> CommandResult:
    return CommandResult(text=text, exit_code=1)


# Navigation

def pwd(command: Command, ctx: ShellContext) -> CommandResult:
    """Print working directory.

    Usage:
        pwd

    Examples:
        pwd                    # Show current directory
    """
    return CommandResult(text=memfs.format_path(ctx.cwd))


def ls(command: Command, ctx: ShellContext) -> CommandResult:
    """List directory contents.

    Usage:
        ls [PATH]

    Options:
        PATH                   Directory to list (default: current)

    Examples:
        ls                     # List current directory
        ls /home               # List an absolute path
        ls README.md           # A file lists as itself
    """
    path_arg = command.arg(0, '.')
    target = memfs.resolve(path_arg, ctx.cwd)
    node = memfs.locate(target, ctx.filesystem)

    if node is None:
        return CommandResult(
            text=f"ls: cannot access '{path_arg}': No such file or directory",
            exit_code=2
        )
    if isinstance(node, FileNode):
        return CommandResult(text=path_arg)
    return CommandResult(text='\n'.join(node.names()))


def cd(command: Command, ctx: ShellContext) -> CommandResult:
    """Change the current directory.

    Usage:
        cd [PATH]

    Options:
        PATH                   Directory to change to (default: ..)

    Examples:
        cd                     # Go to parent directory
        cd Projects            # Enter a child directory
        cd ~                   # Go to the home directory
    """
    path_arg = command.arg(0, '..')
    if path_arg == '~':
        return CommandResult(cwd=tuple(ctx.home))

    target = memfs.resolve(path_arg, ctx.cwd)
    node = memfs.locate(target, ctx.filesystem)

    if node is None:
        return _error(f"cd: {path_arg}: No such file or directory")
    if not isinstance(node, DirNode):
        return _error(f"cd: {path_arg}: Not a directory")
    return CommandResult(cwd=target)


# File operations

def mkdir(command: Command, ctx: ShellContext) -> CommandResult:
    """Create a directory.

    Usage:
        mkdir DIRECTORY

    Options:
        DIRECTORY              Directory name to create

    Examples:
        mkdir test             # Create directory in cwd
        mkdir /home/shared     # Create with absolute path
    """
    if not command.args:
        return _error("mkdir: missing operand")

    name_arg = command.args[0]
    target = memfs.resolve(name_arg, ctx.cwd)
    parent = memfs.locate_parent(target, ctx.filesystem)

    if parent is None:
        return _error(f"mkdir: cannot create directory '{name_arg}': No such file or directory")
    if target[-1] in parent.children:
        return _error(f"mkdir: cannot create directory '{name_arg}': File exists")

    return CommandResult(filesystem=memfs.insert(ctx.filesystem, target, DirNode()))


def touch(command: Command, ctx: ShellContext) -> CommandResult:
    """Create an empty file.

    Usage:
        touch FILE

    Options:
        FILE                   File to create; an existing name is left alone

    Examples:
        touch new_file.txt     # Create empty file
        touch /tmp/marker      # Create file with absolute path
    """
    if not command.args:
        return _error("touch: missing file operand")

    name_arg = command.args[0]
    target = memfs.resolve(name_arg, ctx.cwd)
    parent = memfs.locate_parent(target, ctx.filesystem)

    if parent is None:
        return _error(f"touch: cannot touch '{name_arg}': No such file or directory")
    if target[-1] in parent.children:
        return CommandResult()

    return CommandResult(filesystem=memfs.insert(ctx.filesystem, target, FileNode()))


def cat(command: Command, ctx: ShellContext) -> CommandResult:
    """Display file contents.

    Usage:
        cat FILE

    Options:
        FILE                   File to display

    Examples:
        cat README.md          # Display contents of README.md
    """
    if not command.args:
        return CommandResult()

    path_arg = command.args[0]
    node = memfs.locate(memfs.resolve(path_arg, ctx.cwd), ctx.filesystem)

    if node is None:
        return _error(f"cat: {path_arg}: No such file or directory")
    if isinstance(node, DirNode):
        return _error(f"cat: {path_arg}: Is a directory")
    return CommandResult(text=node.content)


# Environment

def whoami(command: Command, ctx: ShellContext) -> CommandResult:
    """Print the current user."""
    return CommandResult(text=memfs.USER)


def date(command: Command, ctx: ShellContext) -> CommandResult:
    """Print the current date and time."""
    return CommandResult(text=ctx.clock().strftime('%a %b %d %H:%M:%S %Z %Y'))


def echo(command: Command, ctx: ShellContext) -> CommandResult:
    """Display a line of text.

    Usage:
        echo [STRING...]

    Examples:
        echo Hello World       # Print Hello World
    """
    return CommandResult(text=command.text)


NEOFETCH = r"""
  ________________________________________
 ( Why do Chinese people like among us ?? )
 ( That's the only place they can vote.)
  ----------------------------------------
         o   ^__^
          o  (oo)\_______
             (__)\       )\/\             user@webtop
                 ||----w |                 -----------
                 ||     ||                 OS: Ubuntu 22.04.3 LTS x86_64
                                           Host: Your Browser
                                           Kernel: 6.x.x-generic
                                           Uptime: a few minutes
                                           Packages: 1337 (dpkg)
                                           Shell: bash 5.1.16
                                           Resolution: 1920x1080
                                           Terminal: ReactTerm
 """


def neofetch(command: Command, ctx: ShellContext) -> CommandResult:
    """Show system information."""
    return CommandResult(text=NEOFETCH)


HELP_TEXT = """Locally supported commands:
  help       Show this help message
  clear      Clear the terminal screen
  whoami     Print the current user
  pwd        Print the current working directory
  ls [path]  List directory contents
  cd [path]  Change directory
  mkdir <dir>   Create a new directory
  touch <file>  Create a new empty file
  cat <file>    Concatenate and display files
  echo          Display a line of text
  neofetch      Show system information

Games (type to play):
  snake         Play the classic Snake game
  2048          Play 2048 number puzzle
  guess         Number guessing game
  tictactoe     Play Tic Tac Toe vs Computer
  hangman       Play Hangman word game
  fortune       Get a random fortune
  cowsay <msg>  Make a cow say something
  cmatrix       Show Matrix-style animation"""


def _extract_docstring_sections(docstring: str) -> dict:
    """Extract the description, usage and example lines from a docstring."""
    lines = docstring.strip().split('\n')
    sections = {'description': lines[0].strip(), 'usage': '', 'options': [], 'examples': []}

    current_section = None
    for line in lines[1:]:
        line = line.strip()
        if line.startswith('Usage:'):
            current_section = 'usage'
        elif line.startswith('Options:'):
            current_section = 'options'
        elif line.startswith('Examples:'):
            current_section = 'examples'
        elif line and current_section == 'usage':
            sections['usage'] = line
        elif line and current_section:
            sections[current_section].append(line)

    return sections


def help(command: Command, ctx: ShellContext) -> CommandResult:
    """Show this help message.

    Usage:
        help [COMMAND]

    Options:
        COMMAND                Command to get help for

    Examples:
        help                   # Show all commands
        help ls                # Show help for ls
    """
    if not command.args:
        return CommandResult(text=HELP_TEXT)

    name = command.args[0].lower()
    if name == 'clear':
        return CommandResult(text="clear - Clear the terminal screen\n\nUsage:\n    clear")

    handler = COMMANDS.get(name)
    if handler is None or not handler.__doc__:
        return _error(f"help: no help available for '{name}'")

    sections = _extract_docstring_sections(handler.__doc__)
    help_lines = [f"{name} - {sections['description']}"]
    if sections['usage']:
        help_lines += ["", "Usage:", f"    {sections['usage']}"]
    if sections['options']:
        help_lines += ["", "Options:"] + [f"    {opt}" for opt in sections['options']]
    if sections['examples']:
        help_lines += ["", "Examples:"] + [f"    {ex}" for ex in sections['examples']]
    return CommandResult(text='\n'.join(help_lines))


# Games and novelty output

FORTUNES = [
    "The only way to do great work is to love what you do. - Steve Jobs",
    "In the middle of difficulty lies opportunity. - Albert Einstein",
    "Code is like humor. When you have to explain it, it's bad. - Cory House",
    "First, solve the problem. Then, write the code. - John Johnson",
    "Experience is the name everyone gives to their mistakes. - Oscar Wilde",
    "The best error message is the one that never shows up. - Thomas Fuchs",
    "Programming isn't about what you know; it's about what you can figure out. - Chris Pine",
    "The most disastrous thing that you can ever learn is your first programming language. - Alan Kay",
    "Simplicity is the soul of efficiency. - Austin Freeman",
    "Any fool can write code that a computer can understand. Good programmers write code that humans can understand. - Martin Fowler",
    "Talk is cheap. Show me the code. - Linus Torvalds",
    "Sometimes it pays to stay in bed on Monday, rather than spending the rest of the week debugging Monday's code. - Dan Salomon",
    "There are only two kinds of programming languages: those people always complain about and those nobody uses.",
    "Linux is only free if your time has no value. - Jamie Zawinski",
    "Given enough eyeballs, all bugs are shallow. - Linus's Law",
]

MATRIX_GLYPHS = (
    'ｱｲｳｴｵｶｷｸｹｺｻｼｽｾｿﾀﾁﾂﾃﾄﾅﾆﾇﾈﾉﾊﾋﾌﾍﾎﾏﾐﾑﾒﾓﾔﾕﾖﾗﾘﾙﾚﾛﾜﾝ'
    '0123456789'
)

HANGMAN_WORDS = ['javascript', 'terminal', 'ubuntu', 'linux', 'python',
                 'coding', 'developer', 'computer', 'keyboard', 'algorithm']

GAME_FOOTER = "Type 'help' for other commands."


def fortune(command: Command, ctx: ShellContext) -> CommandResult:
    """Get a random fortune."""
    return CommandResult(text=ctx.rng.choice(FORTUNES))


def cowsay(command: Command, ctx: ShellContext) -> CommandResult:
    """Make a cow say something.

    Usage:
        cowsay [MESSAGE]

    Examples:
        cowsay hello           # The cow says hello
    """
    message = command.text or "Moo!"
    border = len(message) + 2
    return CommandResult(text='\n'.join([
        ' ' + '_' * border,
        f"< {message} >",
        ' ' + '-' * border,
        "        \\   ^__^",
        "         \\  (oo)\\_______",
        "            (__)\\       )\\/\\",
        "                ||----w |",
        "                ||     ||",
    ]))


def cmatrix(command: Command, ctx: ShellContext) -> CommandResult:
    """Show Matrix-style animation."""
    rows = [''.join(ctx.rng.choice(MATRIX_GLYPHS) for _ in range(60)) for _ in range(15)]
    text = '\x1b[32m' + '\n'.join(rows) + '\n'
    text += '\n[Press Ctrl+C to exit in a real terminal]\n'
    text += 'Matrix simulation displayed. In real cmatrix, this runs continuously.'
    return CommandResult(text=text)


def game_2048(command: Command, ctx: ShellContext) -> CommandResult:
    """Play 2048 number puzzle."""
    board = [[0] * 4 for _ in range(4)]
    for row, col in ctx.rng.sample([(r, c) for r in range(4) for c in range(4)], 2):
        board[row][col] = 2 if ctx.rng.random() < 0.9 else 4

    lines = [
        "",
        "╔════════════════════════════════════════╗",
        "║              2048 GAME                 ║",
        "╠════════════════════════════════════════╣",
    ]
    for row in board:
        cells = ''.join(('·' if cell == 0 else str(cell)).rjust(4) + '  ' for cell in row)
        lines.append(f"║  {cells}  ║")
    lines += [
        "╠════════════════════════════════════════╣",
        "║  Use arrow keys to move tiles          ║",
        "║  Combine same numbers to reach 2048!   ║",
        "║  Score: 0                              ║",
        "╚════════════════════════════════════════╝",
        "",
        "Note: This is a display demo. Full interactive 2048 ",
        "requires a dedicated game mode (coming soon!).",
        GAME_FOOTER,
    ]
    return CommandResult(text='\n'.join(lines))


def guess(command: Command, ctx: ShellContext) -> CommandResult:
    """Number guessing game."""
    secret = ctx.rng.randint(1, 100)
    hint = 'is greater than 50' if secret > 50 else 'is 50 or less'
    return CommandResult(text=f"""
🎮 NUMBER GUESSING GAME
═══════════════════════════════════════
I'm thinking of a number between 1 and 100.

The secret number is: {secret}

In a full implementation, you would type guesses
and I would tell you "higher" or "lower".

Here's a hint: The number {hint}.

To play interactively, this would require game mode.
For now, the answer was revealed above! 🎉

{GAME_FOOTER}""")


def hangman(command: Command, ctx: ShellContext) -> CommandResult:
    """Play Hangman word game."""
    word = ctx.rng.choice(HANGMAN_WORDS)
    revealed = ' '.join('_' for _ in word)
    return CommandResult(text=f"""
╔═══════════════════════════════════════╗
║         HANGMAN WORD GAME             ║
╠═══════════════════════════════════════╣
║                                       ║
║      ┌──────┐                         ║
║      │      │                         ║
║      │      O                         ║
║      │     /|\\                        ║
║      │     / \\                        ║
║      │                                ║
║   ═══╧═══                             ║
║                                       ║
║   Word: {revealed.ljust(25)} ║
║   Letters guessed: none               ║
║                                       ║
║   Hint: It's a {len(word)}-letter word!         ║
║   The word was: {word.ljust(21)} ║
╚═══════════════════════════════════════╝

Interactive mode coming soon!
{GAME_FOOTER}""")


def tictactoe(command: Command, ctx: ShellContext) -> CommandResult:
    """Play Tic Tac Toe vs Computer."""
    board = [' '] * 9
    board[ctx.rng.randrange(9)] = 'X'
    b = board
    return CommandResult(text=f"""
╔═══════════════════════════════════════╗
║          TIC TAC TOE                  ║
╠═══════════════════════════════════════╣
║                                       ║
║         {b[0]} │ {b[1]} │ {b[2]}                     ║
║        ───┼───┼───                    ║
║         {b[3]} │ {b[4]} │ {b[5]}                     ║
║        ───┼───┼───                    ║
║         {b[6]} │ {b[7]} │ {b[8]}                     ║
║                                       ║
║   You are X, Computer is O            ║
║   Enter position (1-9) to play        ║
║                                       ║
║   Position map:                       ║
║    1 │ 2 │ 3                          ║
║   ───┼───┼───                         ║
║    4 │ 5 │ 6                          ║
║   ───┼───┼───                         ║
║    7 │ 8 │ 9                          ║
║                                       ║
╚═══════════════════════════════════════╝

Interactive mode coming soon!
{GAME_FOOTER}""")


SNAKE_BOARD = f"""
╔═══════════════════════════════════════════════════╗
║                   SNAKE GAME                      ║
╠═══════════════════════════════════════════════════╣
║                                                   ║
║   ┌─────────────────────────────────────────┐     ║
║   │ · · · · · · · · · · · · · · · · · · · · │     ║
║   │ · · · · · · · · · · · · · · · · · · · · │     ║
║   │ · · · · · · · · · · · · · · · · · · · · │     ║
║   │ · · · · ████████ · · · · · · · · · · · · │     ║
║   │ · · · · · · · · · · · · · ● · · · · · · │     ║
║   │ · · · · · · · · · · · · · · · · · · · · │     ║
║   │ · · · · · · · · · · · · · · · · · · · · │     ║
║   │ · · · · · · · · · · · · · · · · · · · · │     ║
║   └─────────────────────────────────────────┘     ║
║                                                   ║
║   Controls: ↑ ↓ ← → (Arrow Keys)                  ║
║   Score: 0  |  High Score: 42                     ║
║   ● = Food  |  ████ = Snake                       ║
║                                                   ║
╚═══════════════════════════════════════════════════╝

🐍 Welcome to Snake!
Use arrow keys to control the snake.
Eat the food (●) to grow longer.
Don't hit the walls or yourself!

Interactive game mode coming soon!
{GAME_FOOTER}"""


def snake(command: Command, ctx: ShellContext) -> CommandResult:
    """Play the classic Snake game."""
    return CommandResult(text=SNAKE_BOARD)


COMMANDS: Dict[str, Handler] = {
    'help': help,
    'whoami': whoami,
    'date': date,
    'echo': echo,
    'neofetch': neofetch,
    'pwd': pwd,
    'ls': ls,
    'cd': cd,
    'mkdir': mkdir,
    'touch': touch,
    'cat': cat,
    'fortune': fortune,
    'cowsay': cowsay,
    'cmatrix': cmatrix,
    'snake': snake,
    '2048': game_2048,
    'guess': guess,
    'tictactoe': tictactoe,
    'hangman': hangman,
}
