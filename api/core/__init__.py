"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks both features use (DB connection
provider, input guard, logging). Feature-specific SQL and business logic
live in the corresponding feature package (`auth/`, `inventory/`).
"""
