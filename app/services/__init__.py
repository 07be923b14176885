"""Services Layer — tool definitions, tool handlers, agent runner, and tool dispatch.

Invariants:
    - Handlers split by tool family (dataset, Knowledge DB, graph, proxy)
    - Tool dispatch uses explicit dict mapping (no auto-discovery)

Design Decisions:
    - define_*_tools.py / handle_*.py pairs: schema next to its family, logic next to its family
"""
