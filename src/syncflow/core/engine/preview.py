# src/syncflow/core/engine/preview.py
"""
Plan preview (dry-run) de uma árvore resolvida.

Objetivo:
- Apresentar o plano de execução de uma RunConfiguration sem executá-lo.
- NÃO chama o serviço de sincronização.
- NÃO altera a árvore recebida.

Saídas:
- `plan_to_dict` → estrutura aninhada serializável (JSON)
- `render_plan`  → texto indentado, uma linha por nó
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from syncflow.core.pipeline.step import ResolvedStep
from syncflow.core.pipeline.types import StepType

CIRCULAR_MARKER = "[circular reference]"
NOT_FOUND_MARKER = "[sequence not found]"


def _markers(node: ResolvedStep) -> List[str]:
    out = []
    if node.circular:
        out.append(CIRCULAR_MARKER)
    if node.not_found:
        out.append(NOT_FOUND_MARKER)
    return out


def _node_to_dict(node: ResolvedStep) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": node.node_id,
        "name": node.name,
        "type": node.type.value,
        "profile": node.effective_profile,
        "circular": node.circular,
        "not_found": node.not_found,
        "children": [_node_to_dict(c) for c in node.children],
    }
    if node.type is StepType.DELAY:
        data["seconds"] = node.definition.seconds
    return data


def plan_to_dict(steps: Sequence[ResolvedStep]) -> List[Dict[str, Any]]:
    """Representação aninhada e serializável do plano."""
    return [_node_to_dict(s) for s in steps]


def plan_to_json(steps: Sequence[ResolvedStep]) -> str:
    return json.dumps(plan_to_dict(steps), ensure_ascii=False, indent=2)


def render_plan(steps: Sequence[ResolvedStep], *, title: str | None = None) -> str:
    """
    Renderiza o plano como texto, uma linha por nó:

        1     LinearSequence    Imports    profile=Delta Import
          1.1 RunProfile        AD         profile=Full Import
          1.2 Delay             Pause      30s

    Nós circulares e Sequences não encontradas recebem um marcador.
    """
    rows = []
    for root in steps:
        for node in root.walk():
            depth = node.node_id.count(".")
            ident = "  " * depth + node.node_id
            if node.type is StepType.DELAY:
                detail = f"{node.definition.seconds}s"
            else:
                detail = f"profile={node.effective_profile}"
            rows.append((ident, node.type.value, node.name, " ".join([detail] + _markers(node))))

    lines = [title] if title else []
    if not rows:
        lines.append("(no steps)")
        return "\n".join(lines)

    w_id = max(len(r[0]) for r in rows)
    w_type = max(len(r[1]) for r in rows)
    w_name = max(len(r[2]) for r in rows)
    for ident, step_type, name, detail in rows:
        lines.append(f"{ident:<{w_id}}  {step_type:<{w_type}}  {name:<{w_name}}  {detail}".rstrip())
    return "\n".join(lines)
