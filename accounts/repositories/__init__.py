"""
Persistence adapters.

Services depend on the ``UserRepository`` contract in ``base``; the SQL
implementation lives in ``sql_repository``.
"""
