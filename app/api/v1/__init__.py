"""api.v1 package.

Keep this file minimal to avoid circular imports.
Submodules (registries, assignments, activity_logs, etc.) are
imported directly where needed, e.g.:

    from app.api.v1 import assignments          # standard implicit submodule import
    # or
    from app.api.v1.assignments import router
"""
