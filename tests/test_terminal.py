#!/usr/bin/env python3
"""
Tests for the terminal session: state application, scrollback, history,
tab completion and the single outstanding command rule.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from unittest.mock import AsyncMock

import pytest

from memshell import memfs
from memshell.commands import CommandResult
from memshell.executor import CommandExecutor
from memshell.terminal import (
    TerminalSession, TerminalConfig, CommandHistory, SessionBusyError, WELCOME_LINES, main
)


@pytest.fixture
def session():
    """A session with no API key and plain prompts."""
    config = TerminalConfig(enable_colors=False, api_key=None)
    return TerminalSession(config=config, executor=CommandExecutor())


async def hang(command_line):
    await asyncio.sleep(3600)
    return 'never'


class FakeReadline:
    """Records what the session asks of readline."""

    def __init__(self, entries=()):
        self.entries = list(entries)
        self.length = None
        self.auto_history = True
        self.completer = None

    def set_auto_history(self, enabled):
        self.auto_history = enabled

    def set_history_length(self, length):
        self.length = length

    def clear_history(self):
        self.entries = []

    def add_history(self, line):
        self.entries.append(line)

    def set_completer_delims(self, delims):
        pass

    def set_completer(self, completer):
        self.completer = completer

    def parse_and_bind(self, binding):
        pass


class TestSessionState:

    def test_starts_at_home(self, session):
        assert session.cwd == ('home', 'user')
        assert [item.text for item in session.scrollback] == WELCOME_LINES

    @pytest.mark.asyncio
    async def test_cd_updates_cwd(self, session):
        await session.submit('cd ..')
        assert session.cwd == ('home',)
        assert await session.submit('pwd') == '/home'

    @pytest.mark.asyncio
    async def test_mkdir_replaces_snapshot(self, session):
        before = session.filesystem
        await session.submit('mkdir work')
        assert session.filesystem is not before
        assert 'work' not in memfs.locate(('home', 'user'), before).children
        assert await session.submit('ls') == 'Documents\nProjects\nREADME.md\nwork'

    @pytest.mark.asyncio
    async def test_failed_command_keeps_state(self, session):
        before = session.filesystem
        output = await session.submit('mkdir Projects')
        assert output == "mkdir: cannot create directory 'Projects': File exists"
        assert session.filesystem is before

    @pytest.mark.asyncio
    async def test_cd_into_file_rejected(self, session):
        await session.submit('cd README.md')
        assert session.cwd == ('home', 'user')

    @pytest.mark.asyncio
    async def test_scrollback_records_prompt_and_output(self, session):
        await session.submit('cd Projects')
        await session.submit('pwd')
        items = session.scrollback[len(WELCOME_LINES):]
        assert [(i.kind, i.text, i.prompt) for i in items] == [
            ('command', 'cd Projects', '~'),
            ('command', 'pwd', '~/Projects'),
            ('output', '/home/user/Projects', None),
        ]
        assert [i.id for i in session.scrollback] == list(range(len(session.scrollback)))

    @pytest.mark.asyncio
    async def test_blank_input_ignored(self, session):
        count = len(session.scrollback)
        assert await session.submit('   ') == ''
        assert len(session.scrollback) == count
        assert session.history.history == []

    @pytest.mark.asyncio
    async def test_clear_wipes_scrollback(self, session):
        await session.submit('echo hi')
        assert await session.submit('CLEAR') == ''
        assert session.scrollback == []
        await session.submit('echo again')
        assert session.scrollback[0].id == 0

    @pytest.mark.asyncio
    async def test_clear_never_reaches_executor(self, session):
        resolver = AsyncMock(return_value='nope')
        session.executor = CommandExecutor(resolver, commands={})
        await session.submit('clear')
        resolver.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_command_without_key(self, session):
        output = await session.submit('apt install vim')
        assert output.startswith('Error: GEMINI_API_KEY is not configured.')

    @pytest.mark.asyncio
    async def test_resolver_exception_is_printed(self, session):
        session.executor = CommandExecutor(
            AsyncMock(side_effect=ConnectionError('network unreachable')))
        before = (session.filesystem, session.cwd)
        assert await session.submit('vim') == 'Error: network unreachable'
        assert not session.busy
        assert (session.filesystem, session.cwd) == before
        assert session.scrollback[-1].text == 'Error: network unreachable'
        assert await session.submit('pwd') == '/home/user'

    def test_apply(self, session):
        root = memfs.DirNode()
        session.apply(CommandResult(filesystem=root, cwd=()))
        assert session.filesystem is root
        assert session.cwd == ()
        session.apply(CommandResult(text='ignored'))
        assert session.filesystem is root


class TestConfiguredHome:

    @pytest.fixture
    def session(self):
        config = TerminalConfig(enable_colors=False, api_key=None, home=('home',))
        return TerminalSession(config=config)

    def test_starts_at_configured_home(self, session):
        assert session.cwd == ('home',)
        assert session.get_prompt() == 'user@linux:~$ '

    @pytest.mark.asyncio
    async def test_cd_tilde_matches_prompt(self, session):
        await session.submit('cd /')
        await session.submit('cd ~')
        assert session.cwd == ('home',)
        assert session.get_prompt() == 'user@linux:~$ '


class TestBusy:

    @pytest.mark.asyncio
    async def test_second_submission_rejected_while_pending(self, session):
        release = asyncio.Event()

        async def slow(command_line):
            await release.wait()
            return 'done'

        session.executor = CommandExecutor(slow)
        first = asyncio.ensure_future(session.submit('uptime'))
        await asyncio.sleep(0)
        assert session.busy
        with pytest.raises(SessionBusyError):
            await session.submit('pwd')
        release.set()
        assert await first == 'done'
        assert not session.busy

    @pytest.mark.asyncio
    async def test_cancelled_command_releases_session(self, session):
        session.executor = CommandExecutor(hang)
        before = (session.filesystem, session.cwd)
        task = asyncio.ensure_future(session.submit('uptime'))
        await asyncio.sleep(0)
        assert session.busy
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not session.busy
        assert (session.filesystem, session.cwd) == before
        assert await session.submit('pwd') == '/home/user'

    def test_cancel_pending_on_interrupt(self, session):
        session.executor = CommandExecutor(hang)
        before = (session.filesystem, session.cwd)
        loop = asyncio.new_event_loop()
        try:
            task = loop.create_task(session.submit('uptime'))
            loop.run_until_complete(asyncio.sleep(0.01))
            assert session.busy
            session._cancel_pending(loop)
            assert task.cancelled()
        finally:
            loop.close()
        assert not session.busy
        assert (session.filesystem, session.cwd) == before


class TestPrompt:

    @pytest.mark.asyncio
    async def test_plain_prompt(self, session):
        assert session.get_prompt() == 'user@linux:~$ '
        await session.submit('cd /')
        assert session.get_prompt() == 'user@linux:/$ '

    def test_coloured_prompt(self):
        session = TerminalSession(TerminalConfig(api_key=None), executor=CommandExecutor())
        assert session.get_prompt() == '\033[32muser@linux\033[0m:\033[34m~\033[0m$ '


class TestCompletion:

    def test_single_directory_match(self, session):
        assert session.complete('cd Pro') == 'cd Projects/'

    def test_single_file_match(self, session):
        assert session.complete('cat REA') == 'cat README.md '

    @pytest.mark.asyncio
    async def test_common_prefix(self, session):
        await session.submit('mkdir Projector')
        assert session.complete('cd P') == 'cd Project'

    def test_no_match(self, session):
        assert session.complete('cd zzz') == 'cd zzz'

    def test_empty_word(self, session):
        assert session.complete('cd ') == 'cd '


class TestCommandHistory:

    def test_skips_blank_and_repeated_lines(self):
        history = CommandHistory()
        for command in ['ls', 'ls', '  ', 'pwd', 'ls']:
            history.add(command)
        assert history.history == ['ls', 'pwd', 'ls']

    def test_max_size(self):
        history = CommandHistory(max_size=2)
        for command in ['a', 'b', 'c']:
            history.add(command)
        assert history.history == ['b', 'c']

    def test_attach_replaces_readline_history(self):
        history = CommandHistory(max_size=50)
        history.add('ls')
        readline = FakeReadline(entries=['stale'])
        history.attach(readline)
        assert readline.entries == ['ls']
        assert readline.length == 50
        assert readline.auto_history is False

        history.add('pwd')
        history.add('pwd')
        assert readline.entries == ['ls', 'pwd']

    @pytest.mark.asyncio
    async def test_session_records_history(self, session):
        await session.submit('ls')
        await session.submit('clear')
        assert session.history.history == ['ls', 'clear']

    def test_interactive_loop_feeds_readline(self, monkeypatch, capsys):
        config = TerminalConfig(enable_colors=False, api_key=None, history_size=25)
        session = TerminalSession(config=config, executor=CommandExecutor())
        readline = FakeReadline()
        lines = iter(['ls', 'ls', 'cd Projects', 'exit'])
        monkeypatch.setitem(sys.modules, 'readline', readline)
        monkeypatch.setattr('builtins.input', lambda prompt='': next(lines))

        session.run_interactive()

        assert readline.entries == ['ls', 'cd Projects']
        assert readline.length == 25
        assert readline.completer is not None
        assert session.cwd == ('home', 'user', 'Projects')
        assert capsys.readouterr().out.endswith('Goodbye!\n')


def test_main_runs_single_command(capsys, monkeypatch):
    monkeypatch.delenv('GEMINI_API_KEY', raising=False)
    monkeypatch.delenv('GOOGLE_API_KEY', raising=False)
    main(['-c', 'pwd', '--no-color'])
    assert capsys.readouterr().out == '/home/user\n'
