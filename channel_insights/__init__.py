"""YouTube channel analytics: API client, metrics derivation and CLI reports"""

__version__ = "0.1.0"
