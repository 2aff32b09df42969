import logging
from typing import Callable, Optional

from .config import ConverterConfig
from .errors import ConfigurationError, EngineInitError, GenerationError
from .llm_processors.base_llm_processor import BaseLLMProcessor
from .llm_processors.text_rewriter import TextRewriter
from .progress import ProgressReporter
from .prompts import build_rewrite_prompt
from .types import EngineOptions, EngineState
from .utils.llm import count_tokens

logger = logging.getLogger(__name__)

PromptBuilder = Callable[[str], str]
# Called as factory(model_name=..., api_base=..., engine_options=...)
EngineFactory = Callable[..., BaseLLMProcessor]


class GenerativeRewriter:
    """
    Owns the lifecycle of one generative engine and issues rewrite requests.

    States: UNINITIALIZED -> INITIALIZING -> READY (BUSY during a request)
    -> UNLOADED. The engine is brought up lazily for the requested model and
    kept until another model is requested or ``unload`` is called.
    """

    def __init__(
        self,
        reporter: ProgressReporter,
        default_model: str = ConverterConfig.DEFAULT_MODEL,
        model_base_url: Optional[str] = None,
        engine_factory: EngineFactory = TextRewriter,
        context_window: int = ConverterConfig.CONTEXT_WINDOW_TOKENS,
    ) -> None:
        self.reporter = reporter
        self.default_model = default_model
        self.model_base_url = model_base_url
        self.engine_factory = engine_factory
        self.context_window = context_window

        self.state = EngineState.UNINITIALIZED
        self.model_id: Optional[str] = None
        self._engine: Optional[BaseLLMProcessor] = None

    @property
    def is_ready(self) -> bool:
        return self.state == EngineState.READY and self._engine is not None

    def resolve_api_base(self, model_id: str) -> str:
        """
        Location the model is served from. Only the built-in default model
        resolves without an explicit ``model_base_url``.
        """
        if self.model_base_url:
            return self.model_base_url
        if model_id == ConverterConfig.DEFAULT_MODEL:
            return ConverterConfig.get_default_api_base()
        raise ConfigurationError(
            f"No model location configured for model '{model_id}'. "
            f"Provide it through the 'model_base_url' option, "
            f"or use the default model ('{ConverterConfig.DEFAULT_MODEL}')."
        )

    async def initialize(self, model_id: str, engine_options: Optional[EngineOptions] = None) -> None:
        if self.is_ready and self.model_id == model_id:
            self.reporter.emit("llm_ready", "LLM already initialized with the correct model.")
            return

        try:
            api_base = self.resolve_api_base(model_id)
        except ConfigurationError as e:
            self.reporter.fail("llm_init_error", f"LLM initialization failed: {e}", e)
            raise

        self.reporter.emit("llm_init", f"Initializing LLM with model: {model_id}... This may take time.")
        if self._engine is not None:
            await self.unload()

        self.state = EngineState.INITIALIZING

        def on_load_progress(fraction: float, status: str) -> None:
            self.reporter.emit("llm_load_progress", f"LLM Loading: {status}", progress=fraction)

        try:
            engine = self.engine_factory(
                model_name=model_id,
                api_base=api_base,
                engine_options=engine_options,
            )
            await engine.load(on_load_progress)
        except Exception as e:
            self.state = EngineState.UNINITIALIZED
            self.model_id = None
            self.reporter.fail("llm_init_error", f"LLM initialization failed: {e}", e)
            raise EngineInitError(f"LLM initialization failed: {e}") from e

        self._engine = engine
        self.model_id = model_id
        self.state = EngineState.READY
        self.reporter.emit("llm_init_complete", "LLM initialized successfully.")
        logger.info(f"🤖 Generative engine ready: {model_id} ({api_base})")

    async def rewrite(
        self,
        text: str,
        model_id: Optional[str] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        engine_options: Optional[EngineOptions] = None,
    ) -> str:
        """
        Rewrite ``text`` with the generative engine.

        Args:
            text: Text (usually Markdown) to rewrite.
            model_id: Model to use; defaults to the rewriter's default model.
            prompt_builder: Builds the prompt from the text; defaults to the
                built-in rewrite instruction.
            engine_options: Options for the engine, used when it is created.

        Returns:
            The engine's reply.
        """
        model_id = model_id or self.default_model
        await self.initialize(model_id, engine_options)

        prompt = (prompt_builder or build_rewrite_prompt)(text)
        prompt_tokens = count_tokens(model_id, prompt)
        if prompt_tokens > self.context_window:
            logger.warning(
                f"⚠️  Rewrite prompt is {prompt_tokens:,} tokens, "
                f"larger than the {self.context_window:,} token context window"
            )

        self.reporter.emit("llm_generate_start", "LLM generating rewritten text...")
        self.state = EngineState.BUSY
        try:
            result = await self._engine.acompletion(prompt=prompt)
        except Exception as e:
            self.reporter.fail("llm_generate_error", f"LLM generation failed: {e}", e)
            raise GenerationError(f"LLM generation failed: {e}") from e
        finally:
            self.state = EngineState.READY

        self.reporter.emit("llm_generate_complete", "LLM rewrite complete.")
        logger.info(
            f"✅ Rewrite completed: "
            f"tokens(in/out)={result.prompt_tokens}/{result.completion_tokens}, "
            f"cost=${result.cost:.4f}"
        )
        return result.content

    async def unload(self) -> None:
        """Release the engine. Does nothing when no engine is loaded."""
        if self._engine is None:
            return

        self.reporter.emit("llm_unload", "Unloading LLM model...")
        engine, self._engine = self._engine, None
        try:
            await engine.unload()
        finally:
            self.model_id = None
            self.state = EngineState.UNLOADED
        self.reporter.emit("llm_unload_complete", "LLM unloaded.")
