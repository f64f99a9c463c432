# src/sljs_pipeline/core/__init__.py
"""
Core do sljs-pipeline.

Implementação canônica, independente de ferramentas concretas, do
planejamento, execução e rastreabilidade de pipelines de build.

Componentes principais:
    - config       → defaults + overrides, deep-merge, erros estruturais
    - pipeline     → protocolo de Step, RunContext, registry, artefatos
    - engine       → planner (DAG) e executor com fail-fast/paralelismo
    - traceability → Manifest, Event Log e fingerprints
    - errors / exceptions → payloads e exceções canônicas

Limites explícitos:
    - Não conhece cargo, wasm-pack ou npm (ver `sljs_pipeline.steps`)
    - Não decide quais pipelines rodam para um evento (ver `coordinator`)
"""
