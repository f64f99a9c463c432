# src/sljs_pipeline/core/config/__init__.py
"""
Camada de configuração do coordenador.

Responsabilidades do pacote:
    - Carregamento de defaults (empacotados ou em arquivo) + overrides locais
    - Resolução da configuração final via deep-merge determinístico
    - Erros estruturais tipados

A configuração é declarativa: comandos das ferramentas, diretórios de
artefatos, definições de pipeline e destino de publicação vivem aqui, e
nenhum Step contém caminhos ou argv embutidos além dos defaults.
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidPipelineDefinitionError,
    UnsupportedConfigFormatError,
)
from .loader import get_section, load_config, load_packaged_defaults
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidPipelineDefinitionError",
    "UnsupportedConfigFormatError",
    "deep_merge",
    "get_section",
    "load_config",
    "load_packaged_defaults",
]
