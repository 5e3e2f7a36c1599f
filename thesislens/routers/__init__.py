"""Router modules for the ThesisLens API."""

from . import articles, chat, ping, pipeline, reports, taxonomy, workspace

__all__ = ["articles", "chat", "ping", "pipeline", "reports", "taxonomy", "workspace"]
