"""Infrastructure layer — YAML serialization and the workspace bundle.

This layer depends on stdlib, third-party libs (ruamel.yaml), and the
domain types it serializes. The service layer bridges between them.
"""
