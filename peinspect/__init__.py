"""Read and summarise the headers of Windows PE files."""

__version__ = "0.1.0"