from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional
import logging
from mdextract.types import ModelResult
from litellm import cost_per_token
from litellm import acompletion
from mdextract.utils.llm import strip_code_fences
from mdextract.errors import GenerationError

logger = logging.getLogger(__name__)

# Receives (fraction in [0, 1], status text) while an engine loads
LoadProgressCallback = Callable[[float, str], None]


class BaseLLMProcessor(ABC):
    """
    Abstract base class for generative engines.

    This is the single capability interface the rewrite orchestrator relies
    on: ``load`` brings the model up, ``acompletion`` runs one request and
    ``unload`` releases it.
    """

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        system_prompt: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the LLM processor with a model name and optional parameters.

        :param model_name: The name of the LLM model to use.
        :param api_base: Base URL the model is served from, if not the provider default.
        :param system_prompt: Optional system prompt sent before every request.
        :param kwargs: Additional keyword arguments for specific configurations.
        """
        self._validate_model(model_name)
        self.model_name = model_name
        self.api_base = api_base
        self.system_prompt = system_prompt

        self._initialize_processor(**kwargs)

        logger.debug(f"Initialized {self.__class__.__name__} with model: {self.model_name} and parameters: {kwargs}")

    def _validate_model(self, model_name: str) -> None:
        """Validate the model name."""
        if not model_name or not isinstance(model_name, str):
            raise ValueError("Model name must be a non-empty string")

    @abstractmethod
    def _initialize_processor(self, **kwargs) -> None:
        """
        Initialize processor-specific parameters.
        Subclasses must implement this to handle their specific kwargs.
        """
        pass

    @abstractmethod
    async def load(self, on_progress: Optional[LoadProgressCallback] = None) -> None:
        """Make the model ready to serve requests, reporting load progress."""
        pass

    @abstractmethod
    async def acompletion(
        self,
        **kwargs: Any
    ) -> ModelResult:
        """
        Generic completion method that calls LiteLLM.

        Returns:
            ModelResult: The LLM response object

        Raises:
            GenerationError: If the LLM call fails
        """
        pass

    @abstractmethod
    async def unload(self) -> None:
        """Release the model."""
        pass

    def _calculate_cost(self, input_tokens: int, completion_tokens: int) -> float:
        """
        Cost of the call in USD. Models without pricing data (local models)
        cost 0.0.
        """
        try:
            prompt_cost, completion_cost = cost_per_token(
                model=self.model_name,
                prompt_tokens=input_tokens,
                completion_tokens=completion_tokens
            )
            return prompt_cost + completion_cost
        except Exception as e:
            logger.debug(f"No pricing data for model '{self.model_name}': {e}")
            return 0.0

    async def _allm_call(
        self,
        messages: List[Dict[str, Any]],
        is_strip_code_fences: bool = False,
        **completion_kwargs: Any,
    ) -> ModelResult:
        try:
            if self.api_base:
                completion_kwargs.setdefault("api_base", self.api_base)
            response = await acompletion(model=self.model_name, messages=messages, **completion_kwargs)
            raw = response.choices[0].message.content or ""
            content = strip_code_fences(raw) if is_strip_code_fences else raw
            usage = response.usage
            cost = self._calculate_cost(usage.prompt_tokens, usage.completion_tokens)

            logger.debug(
                f"✨ LLM response received - "
                f"tokens(in/out)={usage.prompt_tokens}/{usage.completion_tokens}, "
                f"cost=${cost:.4f}, "
                f"content_length={len(content)} chars"
            )

            return ModelResult(
                content=content,
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                cost=cost,
            )
        except Exception as err:
            logger.error(f"🚨 LLM call failed - {err}")
            raise GenerationError(f"LLM call to {self.model_name} failed: {err}") from err
