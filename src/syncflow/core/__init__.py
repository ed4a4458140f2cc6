# src/syncflow/core/__init__.py
"""
Core do SyncFlow.

Componentes principais:
    - config       → documento de configuração (XML/YAML/JSON), parâmetros globais
    - pipeline     → StepDefinition, Sequence, RunConfiguration, tabelas e RunContext
    - engine       → resolução da árvore, execução e orquestração de runs
    - traceability → Manifest e Event Log

Princípios fundamentais:
    - Resolução e execução são passos separados (resolver primeiro, executar depois)
    - Erros de resolução e do serviço externo nunca interrompem a run inteira
    - Erros de configuração são fatais no carregamento
"""
