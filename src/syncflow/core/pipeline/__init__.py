# src/syncflow/core/pipeline/__init__.py
"""
# Pipeline Core — SyncFlow

Este pacote define o **modelo declarativo** e as estruturas de runtime
compartilhadas por Resolver e Executor.

## Componentes
- **types**: `StepType`, `StepStatus`, `StepDefinition`, `Sequence`, `RunConfiguration`
- **registry**: `SequenceTable`, `RunConfigurationTable` (lookup case-insensitive)
- **step**: `ResolvedStep`, nó da árvore resolvida
- **context**: `RunContext`, log estruturado e diagnósticos de uma run

## Invariantes
- Declarações são imutáveis após o load
- Árvores resolvidas nunca são compartilhadas entre runs
"""
