class ConversionError(Exception):
    """Base class for all errors raised by the conversion pipeline."""
    pass

class InvalidInputError(ConversionError):
    """Raised when the payload is not a readable PDF document."""
    pass

class EngineInitError(ConversionError):
    """Raised when the rendering, OCR or generative engine fails to start."""
    pass

class RecognitionError(ConversionError):
    """Raised when OCR fails on a single page."""
    pass

class GenerationError(ConversionError):
    """Raised when the generative rewrite call fails."""
    pass

class ConfigurationError(ConversionError):
    """Raised when a model artifact location cannot be resolved."""
    pass

class PDFFileNotFoundError(ConversionError):
    """Raised when the PDF file is not found."""
    pass

class MarkdownFileWriteError(ConversionError):
    """Raised when the markdown file cannot be written."""
    pass
