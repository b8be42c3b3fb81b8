"""Fleet compliance corrective action form (CAF) workflow service."""

__version__ = "1.0.0"
