import pytest
from unittest.mock import MagicMock, patch

from mdextract.prompts import build_rewrite_prompt
from mdextract.utils.llm import count_tokens, strip_code_fences


@pytest.mark.parametrize("content,expected", [
    ("```markdown\n# Title\n```", "# Title"),
    ("```md\nbody\n```", "body"),
    ("```\n    indented\n```", "    indented"),
    ("plain text", "plain text"),
    ("text with ``` inside", "text with ``` inside"),
    ("```", "```"),
])
def test_strip_code_fences(content, expected):
    assert strip_code_fences(content) == expected


def test_strip_code_fences_keeps_separate_fenced_blocks():
    reply = "```\nA  1\nB  2\n```\n\nPara\n\n```\nC  3\nD  4\n```"
    assert strip_code_fences(reply) == reply


def test_strip_code_fences_keeps_nested_fence():
    reply = "```markdown\n# Title\n\n```\ncode\n```\n```"
    assert strip_code_fences(reply) == reply


def test_count_tokens_uses_model_encoding():
    encoding = MagicMock()
    encoding.encode.return_value = [1, 2, 3]
    with patch("mdextract.utils.llm.tiktoken") as mock_tiktoken:
        mock_tiktoken.encoding_for_model.return_value = encoding
        assert count_tokens("openai/gpt-4o", "hello there") == 3

    mock_tiktoken.encoding_for_model.assert_called_once_with("gpt-4o")


def test_count_tokens_falls_back_for_unknown_models():
    encoding = MagicMock()
    encoding.encode.return_value = [1, 2]
    with patch("mdextract.utils.llm.tiktoken") as mock_tiktoken:
        mock_tiktoken.encoding_for_model.side_effect = KeyError("qwen3:0.6b")
        mock_tiktoken.get_encoding.return_value = encoding
        assert count_tokens("ollama/qwen3:0.6b", "hi") == 2

    mock_tiktoken.get_encoding.assert_called_once_with("cl100k_base")


def test_rewrite_prompt_embeds_text():
    prompt = build_rewrite_prompt("Some {braced} text")
    assert "Original Text:\nSome {braced} text\n" in prompt
    assert prompt.endswith("Rewritten Text:")
