"""
Completion Client
=================

Async client for an OpenAI-compatible chat completions endpoint.

One request per call, no retry. Failures are raised typed:
- TransportError: connection problems, timeouts
- UpstreamError: non-2xx status or a payload without a completion

Example:
    client = CompletionClient(LLMConfig(api_key="sk-..."))
    text = await client.complete(system_prompt="...", user_prompt="...")
    await client.close()
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
import structlog

from docgraph.config import LLMConfig
from docgraph.exceptions import TransportError, UpstreamError

log = structlog.get_logger(__name__)

ERROR_BODY_CHARS = 500


class CompletionClient:
    """
    Chat completions client backed by a shared aiohttp session.

    The session is created lazily on first use and reused until close().
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self._last_usage: Dict[str, int] = {}

    @property
    def last_usage(self) -> Dict[str, int]:
        """Token usage reported by the last successful call."""
        return self._last_usage.copy()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            )
        return self.session

    async def close(self):
        """Close the aiohttp session."""
        if self.session and not self.session.closed:
            await self.session.close()

    def _build_payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.config.temperature,
        }

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Send one chat completion request.

        Args:
            system_prompt: System instruction
            user_prompt: User prompt

        Returns:
            str: Text of ``choices[0].message.content``

        Raises:
            TransportError: If the request could not be sent or completed
            UpstreamError: If the service answered with an error or an unusable payload
        """
        session = await self._get_session()
        payload = self._build_payload(system_prompt, user_prompt)

        log.info("Requesting completion", model=self.config.model, url=self.config.api_url)

        try:
            async with session.post(
                self.config.api_url,
                json=payload,
                headers=self._build_headers(),
            ) as response:

                if not 200 <= response.status < 300:
                    error_text = await response.text(errors="replace")
                    log.error(
                        "Completion service returned an error",
                        status=response.status,
                        body=error_text[:ERROR_BODY_CHARS],
                    )
                    raise UpstreamError(
                        f"Completion service returned error: {response.status}",
                        status=response.status,
                        body=error_text[:ERROR_BODY_CHARS],
                    )

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise UpstreamError(
                        f"Failed to decode completion response: {e}",
                        status=response.status,
                    ) from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error("Completion request failed", error=str(e) or type(e).__name__)
            raise TransportError(
                f"Failed to send request to completion service: {e!r}",
                {"url": self.config.api_url},
            ) from e

        completion = self._extract_completion(data, response.status)

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        self._last_usage = {
            "total_tokens": usage.get("total_tokens", 0),
            "prompt_tokens": usage.get("prompt_tokens", 0),
            "completion_tokens": usage.get("completion_tokens", 0),
        }

        log.info(
            "Completion received",
            chars=len(completion),
            total_tokens=self._last_usage["total_tokens"],
        )
        return completion

    @staticmethod
    def _extract_completion(data: Any, status: int) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("Invalid response format from completion service", status=status) from e
        if not isinstance(content, str):
            raise UpstreamError("Invalid response format from completion service", status=status)
        return content
