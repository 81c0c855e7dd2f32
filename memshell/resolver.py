#!/usr/bin/env python3
"""
Fallback resolver for commands the shell does not implement itself.

A resolver is any async callable taking the raw command line and returning
plain text that should look like real shell output. Failures are raised as
``ResolverError`` so the executor can render them as ordinary output.

Exception Hierarchy:
    ResolverError (base) - transport or service failure
    └── ResolverConfigError - no credential configured
"""

import logging
import os
from typing import Awaitable, Callable, Optional

import aiohttp
import httpx
from google import genai
from google.genai import errors

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gemini-2.5-flash-lite'
API_KEY_VARIABLES = ('GEMINI_API_KEY', 'GOOGLE_API_KEY')

PROMPT_TEMPLATE = """You are an Ubuntu terminal simulator. A user has typed the following command: `{command}`.
Provide a realistic, plausible, and concise output for this command as if it were executed in a standard Ubuntu 22.04 terminal.
Do not explain the command, do not add any introductory text like "Here is the output:", and do not add any markdown formatting (like ```).
Only provide the raw, simulated terminal output.
If the command is invalid or would produce an error, return a realistic error message (e.g., 'bash: {name}: command not found').
If the command would produce no output (like 'sudo apt update'), return an empty string."""

FallbackResolver = Callable[[str], Awaitable[str]]


class ResolverError(Exception):
    """Base exception for resolver failures.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ResolverConfigError(ResolverError):
    """The resolver is missing its API key."""


def api_key_from_env() -> Optional[str]:
    """First non-empty API key found in the environment."""
    for name in API_KEY_VARIABLES:
        value = os.environ.get(name)
        if value:
            return value
    return None


def build_prompt(command_line: str) -> str:
    tokens = command_line.split()
    name = tokens[0] if tokens else command_line
    return PROMPT_TEMPLATE.format(command=command_line, name=name)


class GeminiResolver:
    """
    Resolve commands by asking a Gemini model to imitate an Ubuntu shell.

    The client is created lazily on first use, so constructing a resolver
    without an API key is fine; calling it is what fails.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL):
        self.api_key = api_key
        self.model = model
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if not self.api_key:
            raise ResolverConfigError("GEMINI_API_KEY is not configured")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def __call__(self, command_line: str) -> str:
        client = self._get_client()
        logger.debug("Resolving %r with model %s", command_line, self.model)
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=build_prompt(command_line),
            )
        except errors.APIError as e:
            raise ResolverError(f"{e.code} {e.message}") from e
        except (httpx.HTTPError, aiohttp.ClientError) as e:
            raise ResolverError(str(e) or type(e).__name__) from e
        except ValueError as e:
            # UnknownApiResponseError is a ValueError
            raise ResolverError(f"unreadable response: {e}") from e

        return response.text or ""
