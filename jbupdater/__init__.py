"""JetBrains Updater — keep locally installed JetBrains IDEs on the newest build."""

__version__ = "0.1.0"
