# src/sljs_pipeline/core/config/merge.py
"""
Deep-merge canônico de configuração.

Política de merge (v1):
    - dict + dict → merge recursivo por chave
    - list        → sobrescrita total (argv de ferramentas nunca é mesclado)
    - None        → sobrescrita explícita (ex.: remover filtro de branch)
    - escalar     → sobrescrita direta
    - conflito de tipos → ConfigTypeConflictError

Nenhum input é mutado. O mesmo par (base, override) sempre produz o
mesmo resultado.
"""

from copy import deepcopy
from typing import Any, Dict, List

from .errors import ConfigTypeConflictError


def deep_merge(
    base: Dict[str, Any],
    override: Dict[str, Any],
    _path: List[str] = None,  # type: ignore[assignment]
) -> Dict[str, Any]:
    """
    Combina `override` sobre `base` e retorna um novo dicionário.

    Args:
        base (Dict[str, Any]): Configuração base (ex.: defaults empacotados).
        override (Dict[str, Any]): Overrides explícitos (ex.: config local).

    Returns:
        Dict[str, Any]: Nova configuração resultante.

    Raises:
        ConfigTypeConflictError: Se uma chave muda de tipo entre base e override.
            A mensagem inclui o caminho completo da chave (`a.b.c`).
    """
    path = list(_path or [])

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        base_value = result.get(key)
        key_path = path + [str(key)]

        if key not in result or base_value is None or override_value is None:
            result[key] = deepcopy(override_value)
            continue

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value, key_path)
            continue

        if isinstance(base_value, list) and isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        # bool é subclasse de int: comparar tipos exatos
        if type(base_value) is not type(override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{'.'.join(key_path)}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
