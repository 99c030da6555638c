"""Farm operations schedule engine.

Modules:
- config: immutable configuration loaded from YAML/JSON and the environment
- dates: schedule date labels and island-time conversion
- fields: field value shapes exchanged with the record store
- slots: slot metadata parsing from schema field names
- cache: TTL caches for task lookups
- store: record store adapters (hosted API, local SQL)
- engine: registry resolution, loading, publishing, weekly view, auto-report
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "dates",
    "fields",
    "slots",
    "cache",
    "store",
    "engine",
    "cli",
]
