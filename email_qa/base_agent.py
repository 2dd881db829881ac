"""Base class for LLM agents with debug request/response file handling"""
import re
import json
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional
from openai import OpenAI

from email_qa.config.settings import settings

logger = logging.getLogger(__name__)

FENCED_BLOCK_PATTERN = re.compile(r"```[A-Za-z]*[ \t]*\n?([\s\S]*?)```")
OPEN_FENCE_PATTERN = re.compile(r"```[A-Za-z]*[ \t]*\n?")


class AgentError(Exception):
    """Base exception for agent errors"""
    pass


# Returns the first markdown fenced block (```html / ```) wherever it sits in the reply,
# so prose before or after the fence is dropped. Unfenced text is only trimmed.
def strip_markdown_fence(text: str) -> str:
    cleaned = text.strip()
    match = FENCED_BLOCK_PATTERN.search(cleaned)
    if match:
        return match.group(1).strip()
    # Unterminated fence: keep everything after the opening line
    opening = OPEN_FENCE_PATTERN.search(cleaned)
    if opening:
        return cleaned[opening.end():].strip()
    return cleaned


class BaseAgent:
    """Base class for agents calling OpenAI chat completions"""

    # Initializes base agent with OpenAI client, model config and debug file locations.
    # Debug files land under settings.debug_dir and are only written when AGENTS_DEBUG_FILES=true.
    def __init__(
        self,
        client: OpenAI,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        agent_name: str = "Agent",
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        debug_files: Optional[bool] = None,
        debug_dir: Optional[Path] = None,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.agent_name = agent_name
        self.timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        self.max_tokens = max_tokens if max_tokens is not None else settings.enhancement_max_tokens
        self.debug_files = settings.agents_debug_files if debug_files is None else debug_files

        agent_dir = Path(debug_dir or settings.debug_dir) / agent_name.lower()
        self.response_file = agent_dir / f"{agent_name.lower()}_response.json"
        self.request_file = agent_dir / f"{agent_name.lower()}_request.json"

    # Writes complete agent request payload to JSON file for debugging (only if debug files enabled).
    def _write_request(self, request_data: Dict[str, Any]):
        """Write agent request to JSON file (only if debug enabled)"""
        if not self.debug_files:
            return
        self.request_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.request_file, "w", encoding="utf-8") as f:
            json.dump(request_data, f, indent=2, ensure_ascii=False)

    # Writes agent response (or error) to JSON file for debugging (only if debug files enabled).
    def _write_response(self, response: Dict[str, Any]):
        """Write agent response to JSON file (only if debug enabled)"""
        if not self.debug_files:
            return
        self.response_file.parent.mkdir(parents=True, exist_ok=True)
        payload = {"timestamp": datetime.now(timezone.utc).isoformat(), **response}
        with open(self.response_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

    # Calls chat completions in a worker thread with a hard timeout and returns the fence-stripped text.
    # Every failure (timeout, transport, empty or non-string content) is raised as AgentError.
    async def _call_openai(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Common OpenAI call logic

        Args:
            system_prompt: System prompt content
            user_prompt: User message text
            temperature: Optional temperature override

        Returns:
            Model text output without markdown fences
        """
        temp = temperature if temperature is not None else self.temperature

        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temp,
            "max_tokens": self.max_tokens,
        }
        self._write_request(kwargs)

        try:
            logger.info(
                f"[{self.agent_name}] Calling {self.model} | "
                f"temperature={temp} | "
                f"max_tokens={self.max_tokens} | "
                f"timeout={self.timeout}s | "
                f"prompt_length={len(user_prompt)}"
            )

            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self.client.chat.completions.create,
                    **kwargs
                ),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            error_msg = f"Agent timeout after {self.timeout}s"
            logger.error(f"[{self.agent_name}] ✗ {error_msg}")
            self._write_response({"error": error_msg, "error_type": "timeout"})
            raise AgentError(error_msg)
        except Exception as e:
            error_msg = f"Agent call failed: {str(e)}"
            logger.error(
                f"[{self.agent_name}] ✗ AGENT_ERROR | "
                f"error_type={type(e).__name__} | "
                f"message={error_msg[:200]}"
            )
            self._write_response({"error": error_msg, "error_type": type(e).__name__})
            raise AgentError(error_msg) from e

        choices = getattr(response, "choices", None) or []
        result_text = choices[0].message.content if choices else None
        if not isinstance(result_text, str) or not result_text.strip():
            error_msg = "Agent returned empty response"
            logger.error(f"[{self.agent_name}] ✗ {error_msg}")
            self._write_response({"error": error_msg, "raw_response": repr(result_text)})
            raise AgentError(error_msg)

        usage = getattr(response, "usage", None)
        logger.info(
            f"[{self.agent_name}] ✓ Response received | "
            f"tokens: {getattr(usage, 'total_tokens', 'n/a')} | "
            f"length: {len(result_text)} chars"
        )
        self._write_response({"response": result_text})
        return strip_markdown_fence(result_text)
