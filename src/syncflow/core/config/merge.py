# src/syncflow/core/config/merge.py
"""
Deep-merge do documento de configuração com um override local.

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (uma lista de Sequences local substitui a base)
    - escalar → sobrescrita direta
    - conflito de tipos → erro estrutural explícito

Nenhum input é mutado durante o processo.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois documentos de configuração.

    Args:
        base (Dict[str, Any]): Documento base (ex.: scheduler.yaml).
        override (Dict[str, Any]): Overrides explícitos (ex.: scheduler.local.yaml).

    Returns:
        Dict[str, Any]: Novo documento resultante do deep-merge.

    Raises:
        ConfigTypeConflictError: Se ocorrer conflito de tipo entre base e override.
    """

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        if key not in result or result[key] is None:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        if isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        # int/str são intercambiáveis: o XML entrega números como texto
        scalar = (int, str)
        if isinstance(base_value, scalar) and isinstance(override_value, scalar) and not isinstance(
            base_value, bool
        ) and not isinstance(override_value, bool):
            result[key] = deepcopy(override_value)
            continue

        if type(base_value) is not type(override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
