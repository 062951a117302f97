"""Serve a copilot instructions bundle from a static web host.

Teams that keep their own lookup table, templates and checklist can
publish the bundle directory as-is (GitHub Pages, S3, a CDN ...) and
point ``instructkit --skills-url`` or the MCP server config at it::

    {base_url}/copilot-instructions/SKILL.md
    {base_url}/copilot-instructions/references/validation-checklist.md
    {base_url}/copilot-instructions/examples/go.md
    {base_url}/agents/copilot-instructions-generator.agent.md
"""

from __future__ import annotations

import logging
import re
import warnings
from typing import Any
from urllib.parse import quote, urlparse

import httpx

from instructkit_core import (
    AgentNotFoundError,
    InstructKitError,
    ResourceNotFoundError,
    SkillNotFoundError,
    SkillProvider,
    split_frontmatter,
)

_logger = logging.getLogger(__name__)

# One URL path segment: no separators, no leading dot or hyphen.
_SAFE_IDENTIFIER_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9._-]*$")

#: Default maximum HTTP response size in bytes (10 MB).
DEFAULT_MAX_RESPONSE_BYTES: int = 10 * 1024 * 1024

#: Default HTTP request timeout in seconds.
DEFAULT_TIMEOUT_SECONDS: float = 30.0


def _check_scheme(base_url: str, require_tls: bool) -> None:
    if urlparse(base_url).scheme != "http":
        return
    if require_tls:
        raise ValueError(
            "require_tls is enabled but base_url uses plain HTTP. "
            "Use an HTTPS URL or set require_tls=False."
        )
    warnings.warn(
        "base_url uses unencrypted HTTP; templates and checklist could be "
        "altered in transit. Use HTTPS for shared bundles.",
        UserWarning,
        stacklevel=3,
    )


def _segment(value: str, label: str) -> str:
    """Return *value* quoted for a URL path, or raise :class:`ValueError`."""
    if not _SAFE_IDENTIFIER_RE.match(value):
        raise ValueError(
            f"Invalid {label}: {value!r}; use letters, digits, '.', '_' or '-' "
            f"and start with a letter or digit"
        )
    return quote(value, safe="")


class HTTPStaticFileSkillProvider(SkillProvider):
    """Read skills and agents from a static HTTP host.

    Redirects are not followed and every response is capped at
    *max_response_bytes*.  A client passed in by the caller is used as
    configured and never closed here; otherwise use ``async with`` or
    :meth:`aclose`.

    Args:
        base_url: URL of the bundle root.
        client: Optional pre-configured :class:`httpx.AsyncClient`.
        headers: Extra request headers, e.g. ``Authorization``.  Not
            allowed together with *client*.
        params: Query parameters added to every request, e.g. a signed
            URL token.  Not allowed together with *client*.
        require_tls: Reject ``http://`` URLs instead of warning.
        max_response_bytes: Larger responses raise
            :class:`~instructkit_core.InstructKitError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        require_tls: bool = False,
        max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
    ) -> None:
        if client is not None and (headers is not None or params is not None):
            raise ValueError(
                "Cannot specify both 'client' and 'headers'/'params'. "
                "Configure headers and params on the client directly."
            )
        _check_scheme(base_url, require_tls)

        self._base_url = base_url.rstrip("/")
        self._max_response_bytes = max_response_bytes
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers=headers,
            params=params,
            timeout=httpx.Timeout(DEFAULT_TIMEOUT_SECONDS),
            follow_redirects=False,
        )

    def __repr__(self) -> str:
        return f"HTTPStaticFileSkillProvider({self._base_url!r})"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HTTPStaticFileSkillProvider:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # SkillProvider
    # ------------------------------------------------------------------

    async def get_metadata(self, skill_id: str) -> dict[str, Any]:
        frontmatter, _ = split_frontmatter(await self._skill_md(skill_id))
        return frontmatter

    async def get_body(self, skill_id: str) -> str:
        _, body = split_frontmatter(await self._skill_md(skill_id))
        return body

    async def get_reference(self, skill_id: str, name: str) -> bytes:
        return await self._resource(skill_id, "references", name)

    async def get_example(self, skill_id: str, name: str) -> bytes:
        return await self._resource(skill_id, "examples", name)

    async def get_agent(self, agent_id: str) -> str:
        """Fetch ``agents/<agent_id>.agent.md`` as text."""
        path = f"agents/{_segment(agent_id, 'agent_id')}.agent.md"
        resp = await self._fetch(path, AgentNotFoundError(f"Agent {agent_id!r} not found"))
        return resp.text

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _skill_md(self, skill_id: str) -> str:
        path = f"{_segment(skill_id, 'skill_id')}/SKILL.md"
        resp = await self._fetch(path, SkillNotFoundError(f"Skill {skill_id!r} not found"))
        return resp.text

    async def _resource(self, skill_id: str, subdir: str, name: str) -> bytes:
        path = f"{_segment(skill_id, 'skill_id')}/{subdir}/{_segment(name, 'resource name')}"
        resp = await self._fetch(path, ResourceNotFoundError(f"Resource {name!r} not found"))
        return resp.content

    async def _fetch(self, path: str, not_found: InstructKitError) -> httpx.Response:
        """GET ``{base_url}/{path}``.

        Error messages leave out the URL, which may carry credentials in
        its query string.

        Raises:
            InstructKitError: *not_found* on 404; the base class on other
                HTTP statuses, transport errors or oversized responses.
        """
        try:
            resp = await self._client.get(f"{self._base_url}/{path}")
        except httpx.HTTPError as exc:
            raise InstructKitError("HTTP request failed") from exc
        if resp.status_code == 404:
            raise not_found
        if not resp.is_success:
            raise InstructKitError(f"HTTP {resp.status_code} error")
        size = len(resp.content)
        if size > self._max_response_bytes:
            raise InstructKitError(
                f"Response exceeds maximum size ({self._max_response_bytes} bytes)"
            )
        _logger.debug("Fetched %s (%d bytes)", path, size)
        return resp
