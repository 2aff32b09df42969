import os


class PDFRenderConfig:
    FORMAT = "png"
    USE_PDFTOCAIRO = True

    # PDF user space is 72 units per inch, so scale 1.0 renders at 72 DPI
    POINTS_PER_INCH = 72
    DEFAULT_SCALE = 2.5

    @classmethod
    def get_dpi_for_scale(cls, scale: float) -> int:
        """Get the rendering DPI for a viewport scale factor."""
        if scale <= 0:
            raise ValueError(f"render scale must be positive, got {scale}")
        return round(cls.POINTS_PER_INCH * scale)


class ConverterConfig:
    TESSERACT_LANGUAGE = "eng"

    DEFAULT_MODEL = "ollama/qwen3:0.6b"
    DEFAULT_OLLAMA_API_BASE = "http://localhost:11434"
    # Context window of the default model, used to warn on oversized prompts
    CONTEXT_WINDOW_TOKENS = 4096

    @classmethod
    def get_default_api_base(cls) -> str:
        """Base URL serving the default model, overridable through OLLAMA_API_BASE."""
        return os.environ.get("OLLAMA_API_BASE") or cls.DEFAULT_OLLAMA_API_BASE
