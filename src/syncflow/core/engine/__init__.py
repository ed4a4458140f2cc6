# src/syncflow/core/engine/__init__.py
"""
Engine do SyncFlow.

Componentes principais:
    - resolver    → expansão da árvore com detecção de referência circular
    - executor    → semântica linear/paralela/delay/run profile
    - scheduler   → pontos de entrada `run(name)` e `run_on_demand()`
    - preview     → plano de execução sem efeitos colaterais
    - sync_engine → protocolo do serviço de sincronização externo

Invariantes:
    - A árvore é resolvida por completo antes de qualquer execução
    - Dentro de uma LinearSequence, cada filho termina antes do próximo iniciar
    - Uma ParallelSequence só termina quando todos os filhos terminam
"""
