"""Domain layer — files, documents, annotations, schemas, values.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, or config.
"""
