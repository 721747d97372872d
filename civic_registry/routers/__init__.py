"""Routers package — HTTP endpoint definitions.

Files:
  deps.py  — token services, authenticated principal, role guards
  v1/      — Versioned API routes (/api/v1/*)
"""
