"""BookSwap: book listing chat backend."""

__version__ = "0.1.0"
