"""
SyncFlow — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do SyncFlow.

Objetivo:
- Permitir que adaptadores do engine externo levantem falhas tipadas
- Facilitar o mapeamento determinístico para SchedulerErrorPayload
- Evitar RuntimeError genérico na fronteira com o serviço de sincronização

Regras:
- Exceções carregam apenas dados estruturados (serializáveis).
- Erros de configuração vivem em `syncflow.core.config.errors`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class SchedulerException(Exception):
    """Base class para exceções internas do SyncFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(SchedulerException):
    """RunConfiguration ou Sequence referenciada não existe."""


class CircularReferenceError(SchedulerException):
    """Um Step declarado foi expandido mais de uma vez na mesma resolução."""


class ExternalEngineError(SchedulerException):
    """Falha reportada pelo serviço de sincronização (run profile ou limpeza de histórico)."""
