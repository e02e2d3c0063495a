# src/pages_flow/core/__init__.py
"""
Core do pages_flow.

Implementação canônica, independente de colaboradores externos, das
responsabilidades essenciais de uma run de publicação:

    - config       → carregamento, merge e hashing de configuração
    - pipeline     → protocolo de Step, contexto de execução e registro
    - engine       → planejamento (DAG) e execução de jobs
    - traceability → Manifest e Event Log
    - concurrency  → grupos de concorrência entre runs
    - errors / exceptions → catálogo de erros e exceções tipadas

O core é determinístico, testável de forma isolada e não invoca
ferramentas externas.
"""
