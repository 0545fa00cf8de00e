"""SQLAlchemy demos: models, relationships, query tuning and eager loading."""
