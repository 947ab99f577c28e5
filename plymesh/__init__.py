"""Reading and writing PLY polygon files, plus a sectioned console logger."""

__version__ = "0.1.0"
__all__ = ["types", "header", "reader", "writer", "consolelog"]