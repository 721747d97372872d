"""Pydantic schemas package.

Folder intent:
  common.py  — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  person.py  — Person create / replace / patch DTOs and response models
  auth.py    — Register / login requests and the token response
"""
