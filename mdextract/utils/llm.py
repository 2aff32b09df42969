import logging

import tiktoken

logger = logging.getLogger(__name__)


def strip_code_fences(content: str) -> str:
        """
        Remove enclosing triple backticks and optional language tags if the
        entire string is one fenced block. Preserves internal whitespace/indentation.
        A reply holding several fenced blocks is returned unchanged.
        """
        content = content.rstrip()
        if content.startswith("```") and content.endswith("```") and len(content) >= 6:
            inner = content.removeprefix("```").removesuffix("```")
            if any(line.lstrip().startswith("```") for line in inner.split("\n")):
                return content
            content = inner.rstrip()

            for lang_tag in ("markdown", "md", "text"):
                if content.startswith(lang_tag):
                    content = content[len(lang_tag):]
                    content = content.lstrip()
                    break
            else:
                # No language tag: strip leading newlines only, keep indentation
                content = content.lstrip('\n\r')
        return content


def count_tokens(model_name: str, content: str) -> int:
    """
    Count the tokens of ``content`` with the model's tokenizer, falling back
    to ``cl100k_base`` for models tiktoken does not know.
    """
    try:
        encoding = tiktoken.encoding_for_model(model_name.split("/")[-1])
    except KeyError:
        encoding = tiktoken.get_encoding("cl100k_base")
    token_count = len(encoding.encode(content))
    logger.debug("Calculated %s tokens for model %s", token_count, model_name)
    return token_count
