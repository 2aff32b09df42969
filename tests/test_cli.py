import pytest
from unittest.mock import AsyncMock, patch

import mdextract.cli as cli
from mdextract.errors import PDFFileNotFoundError
from mdextract.utils.env import get_env_var_for_model, get_provider, is_local_model


def test_get_env_var_for_model():
    assert get_env_var_for_model('openai/gpt-4o') == 'OPENAI_API_KEY'
    assert get_env_var_for_model('anthropic/claude') == 'ANTHROPIC_API_KEY'
    assert get_env_var_for_model('gemini/gemini-pro') == 'GEMINI_API_KEY'
    assert get_env_var_for_model('ollama/qwen3:0.6b') is None
    assert get_env_var_for_model('unknown/model') is None


def test_local_models():
    assert is_local_model('ollama/qwen3:0.6b')
    assert is_local_model('ollama_chat/llama3.2')
    assert not is_local_model('openai/gpt-4o')
    assert not is_local_model('gpt-4o')
    assert get_provider('gpt-4o') == ''


def test_no_arguments_prints_help(capsys):
    with patch('sys.argv', ['mdextract']):
        cli.main()
    assert 'usage' in capsys.readouterr().out


def test_runs_conversion_with_arguments():
    argv = ['mdextract', 'doc.pdf', '--mode', 'ocr', '--lang', 'deu', '--scale', '3', '--keep-columns']
    with patch('sys.argv', argv), \
         patch('mdextract.cli.mdextract', new_callable=AsyncMock) as mock_mdextract:
        with pytest.raises(SystemExit) as exc:
            cli.main()

    assert exc.value.code == 0
    kwargs = mock_mdextract.await_args.kwargs
    assert kwargs['pdf_path'] == 'doc.pdf'
    assert kwargs['mode'] == 'ocr'
    assert kwargs['tesseract_language'] == 'deu'
    assert kwargs['render_scale'] == 3.0
    assert kwargs['keep_column_spacing'] is True
    assert kwargs['rewrite'] is False


def test_conversion_error_exit_code():
    with patch('sys.argv', ['mdextract', 'missing.pdf']), \
         patch('mdextract.cli.mdextract', new_callable=AsyncMock, side_effect=PDFFileNotFoundError('missing')):
        with pytest.raises(SystemExit) as exc:
            cli.main()

    assert exc.value.code == 1


def test_rewrite_with_hosted_model_requires_api_key(monkeypatch):
    monkeypatch.delenv('OPENAI_API_KEY', raising=False)
    argv = ['mdextract', 'doc.pdf', '--rewrite', '--model', 'openai/gpt-4o-mini']
    with patch('sys.argv', argv), \
         patch('mdextract.cli.mdextract', new_callable=AsyncMock) as mock_mdextract:
        with pytest.raises(SystemExit) as exc:
            cli.main()

    assert exc.value.code == 1
    mock_mdextract.assert_not_awaited()
