# src/syncflow/core/config/__init__.py
"""
Camada de configuração do SyncFlow.

Responsabilidades do pacote:
    - Carregamento do documento de configuração (XML, YAML ou JSON)
    - Deep-merge determinístico de um override local opcional
    - Validação estrutural de Steps, Sequences e RunConfigurations
    - Conversão estrita dos parâmetros globais

Invariantes:
    - Valores malformados levantam `ConfigurationError` (nunca default silencioso)
    - A configuração carregada é imutável durante a vida do processo
"""
