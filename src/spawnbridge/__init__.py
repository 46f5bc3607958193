"""spawnbridge — external HTTP control plane for a single-threaded monster simulation."""

__version__ = "1.0.0"
