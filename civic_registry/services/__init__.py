"""Services package — all business logic lives here, never in routers.

Files:
  lifecycle.py  — generic create / replace / merge / soft-delete with audit stamping
  person.py     — person registry operations on top of the lifecycle manager
  token.py      — signed bearer token issue and validation (HS256)
  auth.py       — principal registration, login, administrator bootstrap

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
