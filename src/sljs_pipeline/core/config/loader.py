# src/sljs_pipeline/core/config/loader.py
"""
Loader canônico de configuração do pipeline.

A configuração efetiva é resolvida a partir de:
    - um arquivo de defaults (obrigatório; por padrão o YAML empacotado
      `sljs_pipeline/config.defaults.yaml`)
    - um arquivo local de overrides (opcional, YAML ou JSON)

Responsabilidades do módulo:
    - Carregar arquivos em YAML ou JSON
    - Validar o tipo raiz (sempre `dict`)
    - Resolver a configuração final via `deep_merge`
    - Expor acesso tipado a seções (`get_section`)

Invariantes:
    - O resultado é sempre um dicionário puro
    - Overrides nunca mutam os defaults
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não valida definições de pipeline (ver `coordinator.definitions`)
    - Não lê variáveis de ambiente: a verbosidade do toolchain nativo é
      configurada em `toolchain.native.env`
"""

from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


PACKAGED_DEFAULTS = "config.defaults.yaml"


def _parse(text: str, *, suffix: str, origin: str) -> Dict[str, Any]:
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {suffix or origin}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict em {origin}, recebido: {type(data).__name__}"
        )
    return data


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Arquivos vazios são interpretados como `{}`.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    return _parse(
        path.read_text(encoding="utf-8"),
        suffix=path.suffix.lower(),
        origin=str(path),
    )


def load_packaged_defaults() -> Dict[str, Any]:
    """Carrega o YAML de defaults distribuído junto com o pacote."""
    text = (
        resources.files("sljs_pipeline")
        .joinpath(PACKAGED_DEFAULTS)
        .read_text(encoding="utf-8")
    )
    return _parse(text, suffix=".yaml", origin=PACKAGED_DEFAULTS)


def load_config(
    *,
    defaults_path: Optional[Union[str, Path]] = None,
    local_path: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do coordenador.

    Política de resolução:
        - Sem `defaults_path`, usa os defaults empacotados
        - O arquivo local é opcional; se informado e existente, tem
          prioridade sobre os defaults (deep-merge)
        - Um `local_path` informado mas inexistente é ignorado

    Args:
        defaults_path: Caminho para a configuração base.
        local_path: Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """
    if defaults_path is None:
        effective = load_packaged_defaults()
    else:
        effective = _load_file(Path(defaults_path))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    return effective


def get_section(config: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    """
    Retorna a seção aninhada `config[k1][k2]...`, ou `{}` quando ausente.

    Uma seção presente mas que não é dict é erro estrutural.
    """
    node: Any = config or {}
    walked = []
    for key in keys:
        walked.append(key)
        node = node.get(key) if isinstance(node, dict) else None
        if node is None:
            return {}
        if not isinstance(node, dict):
            raise ConfigTypeConflictError(
                f"Seção '{'.'.join(walked)}' deve ser dict, recebido: {type(node).__name__}"
            )
    return node
