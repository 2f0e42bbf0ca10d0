"""
Data collaborators.

Responsibilities:
- Define the catalog and data-store interfaces the engine depends on.
- Provide a DataFrame-backed catalog loaded from the bundled CSV.
- Provide a process-local data store that enforces the collection name constraint.
"""
