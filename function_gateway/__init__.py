"""Function registry and signed invocation gateway for AI agents."""

__version__ = "1.0.0"
