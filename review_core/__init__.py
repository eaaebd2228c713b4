"""Core (UI-agnostic) review explorer logic.

This package contains:
- data loading (CSV -> pandas, one pass per dataset)
- rating normalization onto a shared 0-10 scale
- grouping / mean aggregation and time bucketing
- the rating dimension registry and the shared filter broker
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
