REWRITE_PROMPT_TEMPLATE = """Please rewrite the following text, which was extracted from a PDF. Aim to improve its clarity, correct grammatical errors, and enhance its flow and professional tone, while preserving the original meaning, information, details, context and structure. Correct spelling errors in common words (do not change spelling in uncommon words like names, places, brands, etc.). Output only the rewritten text.

Original Text:
{text}

Rewritten Text:"""


def build_rewrite_prompt(text: str) -> str:
    """Default prompt builder for the rewrite stage."""
    return REWRITE_PROMPT_TEMPLATE.format(text=text)
