"""v1 router package — all /api/v1/* endpoints live here.

Files:
  auth.py     — /auth/register, /auth/login
  persons.py  — person registry CRUD, search, count and audit history

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to civic_registry/services/.
"""
