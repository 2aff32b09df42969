from .base_llm_processor import BaseLLMProcessor, LoadProgressCallback
from mdextract.types import EngineOptions, ModelResult
from mdextract.utils.env import ensure_env_for_model, is_local_model
from typing import Any, Dict, List, Optional
import json
import logging

import aiohttp


logger = logging.getLogger(__name__)

_PULL_TIMEOUT = aiohttp.ClientTimeout(total=None, sock_read=300)
_UNLOAD_TIMEOUT = aiohttp.ClientTimeout(total=30)


class TextRewriter(BaseLLMProcessor):
    """
    Generative engine that rewrites extracted text through LiteLLM.

    Local ``ollama/`` models are pulled on load, with download progress
    streamed from the Ollama API, and evicted from memory on unload. Hosted
    models only need their provider API key.
    """

    def _initialize_processor(self, **kwargs) -> None:
        """
        Args:
            **kwargs: ``engine_options`` are passed through to every completion
                call (temperature, max_tokens, ...).
        """
        self.engine_options: EngineOptions = dict(kwargs.get("engine_options") or {})
        self.loaded = False

    @property
    def ollama_model(self) -> str:
        """Model name as the Ollama API knows it (provider prefix removed)."""
        return self.model_name.split("/", 1)[1]

    async def load(self, on_progress: Optional[LoadProgressCallback] = None) -> None:
        report = on_progress or (lambda fraction, status: None)

        if is_local_model(self.model_name):
            if not self.api_base:
                raise ValueError(f"No API base URL configured for local model {self.model_name}")
            await self._pull(report)
        else:
            ensure_env_for_model(self.model_name)
            report(1.0, f"{self.model_name} is served remotely")

        self.loaded = True
        logger.debug(f"🔌 {self.model_name} loaded")

    async def _pull(self, report: LoadProgressCallback) -> None:
        url = f"{self.api_base.rstrip('/')}/api/pull"
        logger.debug(f"Pulling {self.ollama_model} from {url}")

        async with aiohttp.ClientSession(timeout=_PULL_TIMEOUT) as session:
            async with session.post(url, json={"model": self.ollama_model, "stream": True}) as response:
                if response.status != 200:
                    body = await response.text()
                    raise RuntimeError(f"Model pull failed with status {response.status}: {body.strip()}")

                async for raw_line in response.content:
                    line = raw_line.strip()
                    if not line:
                        continue
                    event = json.loads(line)
                    if "error" in event:
                        raise RuntimeError(f"Model pull failed: {event['error']}")

                    status = event.get("status", "")
                    total = event.get("total")
                    completed = event.get("completed")
                    if total and completed is not None:
                        report(completed / total, status)
                    elif status == "success":
                        report(1.0, status)

    async def acompletion(
        self,
        **kwargs: Any
    ) -> ModelResult:
        """
        Run one rewrite request.

        Args:
            **kwargs: Should contain 'prompt' with the full prompt text.

        Returns:
            ModelResult: The rewritten text with token usage information

        Raises:
            ValueError: If prompt is not provided
        """
        prompt = kwargs.get("prompt", None)

        if prompt is None:
            raise ValueError("prompt must be provided for text rewriting")
        if not self.loaded:
            raise RuntimeError(f"{self.model_name} is not loaded")

        messages: List[Dict[str, Any]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": prompt})

        logger.debug(f"🔍 Sending rewrite request to {self.model_name} ({len(prompt)} chars)")

        return await self._allm_call(
            messages=messages,
            is_strip_code_fences=True,
            **self.engine_options,
        )

    async def unload(self) -> None:
        if not self.loaded:
            return
        self.loaded = False

        if not is_local_model(self.model_name) or not self.api_base:
            return

        # keep_alive=0 asks Ollama to evict the model from memory now
        url = f"{self.api_base.rstrip('/')}/api/generate"
        async with aiohttp.ClientSession(timeout=_UNLOAD_TIMEOUT) as session:
            async with session.post(url, json={"model": self.ollama_model, "keep_alive": 0}) as response:
                if response.status != 200:
                    logger.warning(f"⚠️  Unloading {self.ollama_model} returned status {response.status}")
                else:
                    logger.debug(f"🗑️  {self.ollama_model} evicted from memory")
