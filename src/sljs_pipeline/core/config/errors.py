# src/sljs_pipeline/core/config/errors.py
"""
Exceções canônicas da camada de configuração.

As exceções aqui definidas representam violações estruturais explícitas
da configuração (arquivo ausente, formato desconhecido, conflito de tipos,
definição de pipeline inválida), e não falhas de execução de Steps.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha de build, teste ou publicação
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração.

    Permite captura genérica de erros de configuração e distinção clara
    entre falhas estruturais (antes da run) e falhas de execução.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Levantada quando o arquivo de defaults não existe no caminho informado.

    O arquivo de defaults é obrigatório: sem ele não existe configuração
    efetiva válida, e nenhum default implícito é inventado.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Levantada quando a extensão do arquivo não é suportada.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Levantada quando o conteúdo raiz de um arquivo não é um mapa (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Levantada quando uma chave muda de tipo entre base e override.

    Exemplo de conflito:
        - base:     {"toolchain": {"native": {"verbose": true}}}
        - override: {"toolchain": {"native": "quiet"}}

    `null` explícito no override não é conflito: substitui o valor base
    (ex.: `triggers.push: null` significa "qualquer branch").
    """


class InvalidPipelineDefinitionError(ConfigError):
    """
    Levantada quando `pipelines.<name>` é estruturalmente inválido.

    Exemplos:
        - evento de trigger desconhecido
        - lista de Steps vazia ou com id fora do catálogo
        - chave de concorrência não suportada
    """
