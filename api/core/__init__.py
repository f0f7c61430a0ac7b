"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every feature uses (settings, DB
wiring, error types, validation, pagination filters, logging). Feature SQL and
business rules live in the feature packages (`words/`, `auth/`).
"""
