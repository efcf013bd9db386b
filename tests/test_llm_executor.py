"""
Tests del LLM Executor con gestión de errores.

Verifica que:
- LLM deshabilitado → degradación inmediata
- Retry funciona para errores transitorios
- Primary falla → fallback funciona
- Todo falla → degradación controlada (nunca lanza)

SIN LLM real, SIN red.
Mocks estrictos.
"""
from unittest.mock import MagicMock, patch

from sentinelle.core.config import Settings
from sentinelle.services.llm_executor import LLMExecutionResult, _call_llm_api, execute_llm

# ════════════════════════════════════════════════════════════════
# TEST 1: LLM deshabilitado → degradación inmediata
# ════════════════════════════════════════════════════════════════


@patch("sentinelle.services.llm_executor._call_llm_api")
@patch("sentinelle.services.llm_executor.is_llm_enabled", return_value=False)
def test_llm_disabled(mock_enabled, mock_call):
    result = execute_llm(task_name="test_task", prompt_system="System", prompt_user="User")

    assert result.success is False
    assert result.degraded is True
    assert result.error_type in ("disabled", "no_api_key")
    assert result.output_text is None
    assert result.model_used is None
    mock_call.assert_not_called()


# ════════════════════════════════════════════════════════════════
# TEST 2: Retry luego éxito
# ════════════════════════════════════════════════════════════════


@patch("sentinelle.services.llm_executor.time.sleep")
@patch("sentinelle.services.llm_executor.is_llm_enabled", return_value=True)
@patch("sentinelle.services.llm_executor._call_llm_api")
def test_retry_then_success(mock_call, mock_enabled, mock_sleep):
    mock_call.side_effect = [TimeoutError("Timeout on first attempt"), "Success output from LLM"]

    result = execute_llm(
        task_name="test_task",
        prompt_system="System",
        prompt_user="User",
        primary_model="primary",
        fallback_model="fallback",
        max_retries=2,
        timeout_seconds=10,
    )

    assert result.success is True
    assert result.output_text == "Success output from LLM"
    assert result.model_used == "primary"
    assert result.degraded is False
    assert mock_call.call_count == 2


# ════════════════════════════════════════════════════════════════
# TEST 3: Primary falla → fallback funciona
# ════════════════════════════════════════════════════════════════


@patch("sentinelle.services.llm_executor.time.sleep")
@patch("sentinelle.services.llm_executor.is_llm_enabled", return_value=True)
@patch("sentinelle.services.llm_executor._call_llm_api")
def test_primary_fail_fallback_success(mock_call, mock_enabled, mock_sleep):
    mock_call.side_effect = [Exception("400 bad request"), "Fallback output"]

    result = execute_llm(
        task_name="test_task",
        prompt_system="System",
        prompt_user="User",
        primary_model="primary",
        fallback_model="fallback",
        max_retries=0,
    )

    assert result.success is True
    assert result.model_used == "fallback"
    assert result.output_text == "Fallback output"
    assert [c.kwargs["model"] for c in mock_call.call_args_list] == ["primary", "fallback"]


# ════════════════════════════════════════════════════════════════
# TEST 4: Todo falla → degradación
# ════════════════════════════════════════════════════════════════


@patch("sentinelle.services.llm_executor.time.sleep")
@patch("sentinelle.services.llm_executor.is_llm_enabled", return_value=True)
@patch("sentinelle.services.llm_executor._call_llm_api")
def test_all_fail_degrades(mock_call, mock_enabled, mock_sleep):
    mock_call.side_effect = TimeoutError("Timeout")

    result = execute_llm(
        task_name="test_task",
        prompt_system="System",
        prompt_user="User",
        max_retries=1,
        timeout_seconds=5,
    )

    assert result.success is False
    assert result.degraded is True
    assert result.error_type == "timeout"
    assert result.output_text is None
    # 2 intentos por modelo (1 + 1 retry) × 2 modelos
    assert mock_call.call_count == 4


# ════════════════════════════════════════════════════════════════
# TEST 5: JSON solicitado se propaga a la llamada
# ════════════════════════════════════════════════════════════════


@patch("sentinelle.services.llm_executor.is_llm_enabled", return_value=True)
@patch("sentinelle.services.llm_executor._call_llm_api", return_value='{"explanations": []}')
def test_json_output_forwarded(mock_call, mock_enabled):
    result = execute_llm(task_name="json_task", prompt_system="S", prompt_user="U", json_output=True)

    assert result.success is True
    assert mock_call.call_args.kwargs["json_output"] is True
    assert result.latency_ms is not None


# ════════════════════════════════════════════════════════════════
# TEST 6: Estructura del resultado
# ════════════════════════════════════════════════════════════════


def test_result_structure():
    result = LLMExecutionResult(success=False, degraded=True, error_type="unknown", task_name="t")
    assert result.retries_used == 0
    assert result.executed_at is not None


# ════════════════════════════════════════════════════════════════
# TEST 7: La clave de API sale de Settings, no del entorno
# ════════════════════════════════════════════════════════════════


@patch("openai.OpenAI")
@patch("sentinelle.services.llm_executor.get_settings")
def test_api_key_from_settings(mock_settings, mock_client, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    mock_settings.return_value = Settings(openai_api_key="sk-config", _env_file=None)
    completion = mock_client.return_value.chat.completions.create.return_value
    completion.choices = [MagicMock(message=MagicMock(content="Réponse"))]

    output = _call_llm_api(
        prompt_system="S", prompt_user="U", model="gpt-4o-mini", timeout_seconds=10, max_tokens=50,
    )

    assert output == "Réponse"
    assert mock_client.call_args.kwargs["api_key"] == "sk-config"
    assert mock_client.call_args.kwargs["timeout"] == 10
