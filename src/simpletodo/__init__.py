# src/simpletodo/__init__.py

"""SimpleTodo data core: backups, export/import, search history, quick searches."""

__version__ = "1.0.0"
