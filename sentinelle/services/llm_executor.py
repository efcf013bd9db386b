"""
LLM EXECUTOR CENTRALIZADO con gestión de errores, retry y degradación.

Este módulo es el ÚNICO punto de entrada para ejecutar LLMs.

REGLAS NO NEGOCIABLES:
- PROHIBIDO llamar directamente al cliente OpenAI desde otros módulos.
- TODAS las llamadas a LLM pasan por execute_llm().
- Un documento NUNCA deja de generarse por un error de LLM.
"""
import time
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from sentinelle.core.config import get_settings
from sentinelle.core.logger import log_info, log_warning


# ========================================
# RESULTADO DE EJECUCIÓN
# ========================================

class LLMExecutionResult(BaseModel):
    """
    Resultado de una ejecución de LLM.

    Este modelo SIEMPRE se retorna, incluso si el LLM falla.
    """
    success: bool = Field(..., description="¿La ejecución fue exitosa?")

    output_text: Optional[str] = Field(
        default=None,
        description="Texto generado por el LLM (None si falló)"
    )

    error_type: Optional[Literal[
        "disabled",
        "no_api_key",
        "timeout",
        "api_error",
        "unknown"
    ]] = Field(default=None, description="Tipo de error (si success=False)")

    error_message: Optional[str] = Field(default=None, description="Mensaje de error detallado")

    retries_used: int = Field(default=0, description="Número de reintentos realizados")

    model_used: Optional[str] = Field(default=None, description="Modelo usado (primary o fallback)")

    degraded: bool = Field(default=False, description="¿Se activó modo degradado?")

    latency_ms: Optional[float] = Field(default=None, description="Latencia total de ejecución")

    task_name: str = Field(..., description="Nombre de la tarea ejecutada")

    executed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Timestamp de ejecución"
    )

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


def is_llm_enabled() -> bool:
    """True si LLM_ENABLED=true Y existe API key."""
    return get_settings().llm_available


# ========================================
# EXECUTOR PRINCIPAL
# ========================================

def execute_llm(
    *,
    task_name: str,
    prompt_system: str,
    prompt_user: str,
    primary_model: Optional[str] = None,
    fallback_model: Optional[str] = None,
    max_retries: Optional[int] = None,
    timeout_seconds: Optional[int] = None,
    max_tokens: int = 1200,
    json_output: bool = False,
) -> LLMExecutionResult:
    """
    Ejecuta un LLM con gestión completa de errores.

    Args:
        task_name: Nombre de la tarea (para logging)
        prompt_system: System prompt
        prompt_user: User prompt
        primary_model: Modelo principal (default: Settings)
        fallback_model: Modelo de fallback (default: Settings)
        max_retries: Máximo de reintentos (default: Settings)
        timeout_seconds: Timeout por intento (default: Settings)
        max_tokens: Tokens máximos a generar
        json_output: Pedir respuesta en formato JSON

    Returns:
        LLMExecutionResult (SIEMPRE, nunca lanza excepción)

    COMPORTAMIENTO:
    1. Si LLM deshabilitado -> degraded=True inmediatamente
    2. Intenta con primary_model (con reintentos)
    3. Si sigue fallando, intenta con fallback_model
    4. Si todo falla -> degraded=True
    """
    config = get_settings()
    start_time = time.time()

    primary_model = primary_model or config.primary_model
    fallback_model = fallback_model or config.fallback_model
    max_retries = config.llm_max_retries if max_retries is None else max_retries
    timeout_seconds = timeout_seconds or config.llm_timeout_seconds

    if not is_llm_enabled():
        log_info("LLM deshabilitado, resultado degradado", action="llm_execute", task=task_name)
        return LLMExecutionResult(
            success=False,
            error_type="disabled" if not config.llm_enabled else "no_api_key",
            error_message="LLM is disabled via feature flag or missing API key",
            degraded=True,
            latency_ms=(time.time() - start_time) * 1000,
            task_name=task_name
        )

    attempt_args = dict(
        task_name=task_name,
        prompt_system=prompt_system,
        prompt_user=prompt_user,
        max_retries=max_retries,
        timeout_seconds=timeout_seconds,
        max_tokens=max_tokens,
        json_output=json_output,
    )

    result = _try_execute_with_model(model=primary_model, **attempt_args)
    if result.success:
        result.latency_ms = (time.time() - start_time) * 1000
        return result

    log_warning(
        "Modelo principal falló, probando fallback",
        action="llm_execute",
        task=task_name,
        primary=primary_model,
        fallback=fallback_model,
    )
    result_fallback = _try_execute_with_model(model=fallback_model, **attempt_args)
    if result_fallback.success:
        result_fallback.latency_ms = (time.time() - start_time) * 1000
        return result_fallback

    log_warning("Todos los modelos fallaron", action="llm_execute", task=task_name)
    return LLMExecutionResult(
        success=False,
        error_type=result.error_type or "unknown",
        error_message=f"All models failed. Primary: {result.error_message}. "
                      f"Fallback: {result_fallback.error_message}",
        retries_used=result.retries_used + result_fallback.retries_used,
        degraded=True,
        latency_ms=(time.time() - start_time) * 1000,
        task_name=task_name
    )


# ========================================
# HELPER: Intentar con un modelo
# ========================================

def _try_execute_with_model(
    *,
    task_name: str,
    prompt_system: str,
    prompt_user: str,
    model: str,
    max_retries: int,
    timeout_seconds: int,
    max_tokens: int,
    json_output: bool,
) -> LLMExecutionResult:
    """Intenta ejecutar con un modelo específico (con retries)."""
    retries_used = 0
    last_error = None
    last_error_type = "unknown"

    for attempt in range(max_retries + 1):
        try:
            output = _call_llm_api(
                prompt_system=prompt_system,
                prompt_user=prompt_user,
                model=model,
                timeout_seconds=timeout_seconds,
                max_tokens=max_tokens,
                json_output=json_output,
            )
            log_info(
                "LLM ejecutado",
                action="llm_execute",
                task=task_name,
                model=model,
                attempt=attempt + 1,
            )
            return LLMExecutionResult(
                success=True,
                output_text=output,
                retries_used=retries_used,
                model_used=model,
                task_name=task_name
            )

        except TimeoutError as e:
            last_error = str(e)
            last_error_type = "timeout"
            retries_used = attempt
            if attempt < max_retries:
                time.sleep(1)
                continue

        except Exception as e:
            last_error = str(e)
            error_name = type(e).__name__
            if "api" in error_name.lower() or "openai" in error_name.lower():
                last_error_type = "api_error"
            else:
                last_error_type = "unknown"

            log_warning(
                "Error de LLM",
                action="llm_execute",
                task=task_name,
                model=model,
                attempt=attempt + 1,
                error_type=error_name,
            )

            # Reintento solo para errores transitorios (5xx / timeout)
            if "5" in str(e) or "timeout" in str(e).lower():
                retries_used = attempt
                if attempt < max_retries:
                    time.sleep(1)
                    continue
            break

    return LLMExecutionResult(
        success=False,
        error_type=last_error_type,
        error_message=last_error,
        retries_used=retries_used,
        task_name=task_name
    )


# ========================================
# HELPER: Llamada real a API
# ========================================

def _call_llm_api(
    *,
    prompt_system: str,
    prompt_user: str,
    model: str,
    timeout_seconds: int,
    max_tokens: int,
    json_output: bool = False,
) -> str:
    """
    Llamada real a la API de OpenAI.

    Esta es la ÚNICA función que hace la llamada real.

    Raises:
        TimeoutError: Si excede timeout
        Exception: Otros errores de API
    """
    from openai import OpenAI

    client = OpenAI(api_key=get_settings().openai_api_key, timeout=timeout_seconds)

    kwargs = {}
    if json_output:
        kwargs["response_format"] = {"type": "json_object"}

    response = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": prompt_system},
            {"role": "user", "content": prompt_user}
        ],
        max_tokens=max_tokens,
        temperature=0.2,  # Bajo para textos jurídicos
        **kwargs,
    )

    return response.choices[0].message.content or ""
