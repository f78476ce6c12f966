"""Configuration — pydantic models, settings sources, logging setup."""
