"""
rental_config -- startup configuration for the rental back office.

The configuration is loaded once (``load_config``) and the resulting
``RentalConfig`` is handed to ``init_engine``, ``connect_document_store``
and the repository constructors. There is no module-level configuration
state.
"""

from rental_config.loader import load_config, parse_config
from rental_config.schema import (
    DocumentStoreConfig,
    RelationalStoreConfig,
    RentalConfig,
)

__all__ = [
    "load_config",
    "parse_config",
    "RentalConfig",
    "RelationalStoreConfig",
    "DocumentStoreConfig",
]
