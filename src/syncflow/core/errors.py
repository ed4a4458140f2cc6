"""
SyncFlow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de diagnósticos do SyncFlow.
Erros de resolução e de execução **não interrompem** uma run: eles são
registrados como payloads estruturados e devolvidos no relatório da run.

Todo diagnóstico deve ser:

- explícito
- serializável
- rastreável até o Step que o originou

Erros de configuração não pertencem a este catálogo: eles são exceções
fatais definidas em `syncflow.core.config.errors`.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SchedulerErrorPayload:
    """
    Payload canônico de diagnóstico do SyncFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Resolução
RUN_CONFIGURATION_NOT_FOUND = "RUN_CONFIGURATION_NOT_FOUND"
SEQUENCE_NOT_FOUND = "SEQUENCE_NOT_FOUND"
CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"

# Engine externo
EXTERNAL_ENGINE_ERROR = "EXTERNAL_ENGINE_ERROR"
HISTORY_CLEAR_ERROR = "HISTORY_CLEAR_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def run_configuration_not_found(
    *,
    name: Optional[str],
    known: Optional[list] = None,
    hint: str = "Declare a RunConfiguration no documento de configuração ou corrija o nome solicitado.",
) -> SchedulerErrorPayload:
    return SchedulerErrorPayload(
        type=RUN_CONFIGURATION_NOT_FOUND,
        message=f"Run configuration '{name}' not found.",
        details={"name": name, "known": list(known or [])},
        hint=hint,
    )


def sequence_not_found(
    *,
    name: str,
    node_id: str,
    step_type: str,
    hint: str = "Declare uma Sequence com este nome ou altere o Type do Step para RunProfile/Delay.",
) -> SchedulerErrorPayload:
    return SchedulerErrorPayload(
        type=SEQUENCE_NOT_FOUND,
        message=f"Sequence '{name}' not found.",
        details={"name": name, "node_id": node_id, "step_type": step_type},
        hint=hint,
    )


def circular_reference(
    *,
    name: str,
    node_id: str,
    hint: str = "Remova a referência repetida: cada Step declarado só é expandido uma vez por run.",
) -> SchedulerErrorPayload:
    return SchedulerErrorPayload(
        type=CIRCULAR_REFERENCE,
        message=f"Circular reference to step '{name}'.",
        details={"name": name, "node_id": node_id},
        hint=hint,
    )


def external_engine_error(
    *,
    profile: str,
    node_id: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o estado do serviço de sincronização e o histórico do run profile.",
) -> SchedulerErrorPayload:
    return SchedulerErrorPayload(
        type=EXTERNAL_ENGINE_ERROR,
        message=f"Run profile '{profile}' failed on the synchronization engine.",
        details={"profile": profile, "node_id": node_id, "exc_message": exc_message},
        hint=hint,
    )


def history_clear_error(
    *,
    cutoff: str,
    exc_message: Optional[str] = None,
    hint: str = "O histórico não foi limpo; a próxima run tentará novamente.",
) -> SchedulerErrorPayload:
    return SchedulerErrorPayload(
        type=HISTORY_CLEAR_ERROR,
        message="Clearing the run history failed.",
        details={"cutoff": cutoff, "exc_message": exc_message},
        hint=hint,
    )
