"""docweave — library evaluation orchestrator for declarative YAML templates."""

__version__ = "0.1.0"
