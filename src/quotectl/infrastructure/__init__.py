"""Infrastructure layer — hierarchy graph, SQLite persistence, catalog file.

This layer depends on the domain layer and third-party libs (SQLAlchemy,
NetworkX). It must never import from services, commands, or output.
"""
