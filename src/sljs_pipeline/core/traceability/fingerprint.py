# src/sljs_pipeline/core/traceability/fingerprint.py
"""
Fingerprints canônicos (SHA-256) para rastreabilidade.

Dois tipos de identidade são calculados aqui:
    - da configuração efetiva de uma run (JSON canônico)
    - de uma árvore de diretórios (paths relativos + bytes), usada para
      identificar o conteúdo do diretório de publicação

Invariantes:
    - Entradas estruturalmente equivalentes produzem o mesmo hash
    - O valor é sempre uma string hexadecimal de 64 caracteres
    - Timestamps e permissões de arquivos não participam do hash
"""

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Iterator, Tuple


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Hash SHA-256 da configuração efetiva.

    Política (v1): JSON com chaves ordenadas, separadores compactos, UTF-8.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def iter_tree_files(root: Path) -> Iterator[Tuple[str, Path]]:
    """Arquivos de `root` em ordem determinística, como (path relativo POSIX, path)."""
    files = [p for p in root.rglob("*") if p.is_file()]
    for p in sorted(files, key=lambda x: x.relative_to(root).as_posix()):
        yield p.relative_to(root).as_posix(), p


def compute_tree_hash(root: Path) -> str:
    """
    Hash SHA-256 do conteúdo de uma árvore de diretórios.

    Cada arquivo contribui com seu path relativo e o digest de seus bytes,
    então duas árvores com o mesmo conteúdo produzem o mesmo hash
    independentemente de mtime ou ordem de criação.

    Raises:
        FileNotFoundError: Se `root` não for um diretório existente.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Not a directory: {root}")

    h = hashlib.sha256()
    for rel, path in iter_tree_files(root):
        file_digest = hashlib.sha256()
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                file_digest.update(chunk)
        h.update(rel.encode("utf-8"))
        h.update(b"\0")
        h.update(file_digest.hexdigest().encode("ascii"))
        h.update(b"\n")
    return h.hexdigest()
