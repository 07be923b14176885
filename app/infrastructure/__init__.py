"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external calls wrapped with retry/timeout/error mapping

Design Decisions:
    - One wrapper per external system (Anthropic, proxy backend, Neo4j, JS sandbox)
"""
