"""Services opting into registration with ``@service``."""
