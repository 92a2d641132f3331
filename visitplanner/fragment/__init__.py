"""
URL fragment state layer.

Responsibilities:
- Parse ``#/visit/<destination>?...`` fragments into typed trip preferences.
- Filter and default invalid values instead of raising.
- Serialize preferences back into a canonical, idempotent fragment.
"""
