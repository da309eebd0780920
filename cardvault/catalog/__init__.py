"""
Catalog access: the CatalogClient contract and its TCGdex adapter.
"""
from cardvault.catalog.client import CatalogClient, CatalogNotFound, UpstreamFailure
from cardvault.catalog.tcgdex import TCGdexClient

__all__ = [
    "CatalogClient",
    "CatalogNotFound",
    "UpstreamFailure",
    "TCGdexClient",
]
