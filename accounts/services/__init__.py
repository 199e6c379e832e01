"""
High-level use cases for the accounts API.

Routers call these services instead of touching the repository or mailer
directly.
"""
