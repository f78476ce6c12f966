"""Service layer — schema/values collection, library evaluation, assembly.

Services may import from domain and infrastructure layers.
They must never import from config beyond settings and models.
"""
