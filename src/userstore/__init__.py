"""User data-access layer.

This package contains the persistence code for the ``User`` entity: the domain
model, its SQLModel table, the repository facade, and the runtime
configuration, logging and database services they depend on.
"""

__version__ = "0.1.0"
