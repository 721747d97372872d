"""Repositories — the storage port. Every read takes an explicit include_deleted flag."""
