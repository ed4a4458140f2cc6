# src/syncflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do SyncFlow.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento e a validação estrutural do documento de configuração
(Sequences, RunConfigurations e parâmetros globais).

Ao contrário dos diagnósticos de resolução e execução, estas exceções
são **fatais**: um valor malformado nunca é substituído silenciosamente
por um default.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigurationError`
    - Nenhuma exceção representa falha do engine externo
"""


class ConfigurationError(Exception):
    """
    Exceção base para erros relacionados à configuração do SyncFlow.

    Todas as exceções levantadas durante carregamento, merge e validação
    do documento de configuração herdam desta classe, permitindo captura
    genérica pelo processo hospedeiro.
    """


# Nome curto usado pela camada de config.
ConfigError = ConfigurationError


class ConfigFileNotFoundError(ConfigurationError):
    """
    Exceção levantada quando o documento de configuração não existe
    no caminho informado.

    Limites explícitos:
        - Não tenta localizar o arquivo em outros diretórios
        - Não cria um documento vazio automaticamente
    """


class UnsupportedConfigFormatError(ConfigurationError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - XML (.xml)
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigurationError):
    """
    Exceção levantada quando o conteúdo raiz do documento não é um
    mapa chave-valor (ou, em XML, quando o documento não pode ser lido).
    """


class ConfigTypeConflictError(ConfigurationError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge
    entre o documento base e o override local.

    Exemplo de conflito:
        - base:     {"keep_history_days": 10}
        - override: {"keep_history_days": {"days": 10}}
    """


class InvalidStepTypeError(ConfigurationError):
    """
    Exceção levantada quando um Step declara um `type` ausente ou
    fora do conjunto fechado de variantes
    (LinearSequence, ParallelSequence, Delay, RunProfile).
    """


class InvalidStepDefinitionError(ConfigurationError):
    """
    Exceção levantada quando a declaração de um Step é estruturalmente
    inválida (nome ausente, Delay sem `seconds`, `seconds` não inteiro).
    """


class InvalidSettingValueError(ConfigurationError):
    """
    Exceção levantada quando um parâmetro global não pode ser convertido
    para o tipo esperado (ex.: `DelayInParallelSequence` não numérico).
    """
