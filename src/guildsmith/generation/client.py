from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import aiohttp

from ..blueprint import Blueprint, apply_defaults
from ..engine.actions import EditAction, actions_from_list
from ..errors import GenerationError
from .extract import extract_json
from .prompts import BLUEPRINT_SYSTEM, EDITS_SYSTEM

log = logging.getLogger("guildsmith.generation")


class TextGenerationClient:
    """Client for an Ollama-compatible ``/api/generate`` endpoint.

    The service is stateless from our side: each call sends the fixed system
    instructions plus the user's request and reads back one non-streamed
    completion.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        timeout: float = 120.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._session = session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self._session

    async def complete(self, system: str, prompt: str) -> str:
        payload = {
            "model": self.model,
            "prompt": f"{system}\n\nUser request:\n{prompt}",
            "stream": False,
        }
        url = f"{self.base_url}/api/generate"
        try:
            async with self._get_session().post(url, json=payload) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise GenerationError(f"Generation service HTTP {resp.status}: {body[:300]}")
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise GenerationError(f"Generation service timed out after {self.timeout:g}s") from e
        except aiohttp.ClientError as e:
            raise GenerationError(f"Generation service unreachable: {e}") from e
        except ValueError as e:
            raise GenerationError("Generation service returned invalid JSON") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            log.debug("Unexpected generation payload: %r", data)
            raise GenerationError("Generation service returned an invalid response")
        return text

    async def generate_blueprint(self, prompt: str) -> Blueprint:
        raw = await self.complete(BLUEPRINT_SYSTEM, prompt)
        data = apply_defaults(extract_json(raw))
        log.info("Generated blueprint %r", data.get("name"))
        return Blueprint.from_dict(data)

    async def generate_actions(self, prompt: str) -> List[EditAction]:
        raw = await self.complete(EDITS_SYSTEM, prompt)
        actions = actions_from_list(extract_json(raw).get("actions") or [])
        log.info("Generated %d edit actions", len(actions))
        return actions
