# src/sljs_pipeline/__init__.py
"""
sljs-pipeline: coordenador de build, teste e publicação da biblioteca sljs.

Dois pipelines são definidos por configuração:
    - verify  → build + testes nativos e build + testes WebAssembly, em
      paralelo, com falhas agregadas
    - publish → documentação, pacote WebAssembly, bundle do demo e
      montagem do diretório de publicação, estritamente em sequência,
      com "latest wins" por ref

Arquitetura em alto nível:
    - core.config       → defaults empacotados, overrides e deep-merge
    - core.pipeline     → protocolo de Step, contexto da run, artefatos
    - core.engine       → planejamento (DAG) e execução
    - core.traceability → Manifest, Event Log e fingerprints
    - steps             → Steps concretos (cargo, wasm-pack, npm, cópia)
    - publish           → sinks de publicação
    - coordinator       → seleção por evento, concorrência e publicação

Uso típico:

    from sljs_pipeline.core.config import load_config
    from sljs_pipeline.coordinator import Coordinator, TriggerEvent

    coordinator = Coordinator(config=load_config(), workspace=".")
    result = coordinator.handle(TriggerEvent("push", "refs/heads/main"))
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
