"""
Catalog Client - abstract interface for the upstream card catalog.

The hydration engine only talks to this contract; TCGdexClient is the
concrete adapter. Every call is synchronous and either returns parsed
payload models or raises UpstreamFailure. Retries, if any, happen inside
the adapter, never in the engine.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence

from cardvault.models.catalog import CardBrief, CardDetail, SetDetail

if TYPE_CHECKING:
    from cardvault.hydration.cancellation import CancellationToken


class UpstreamFailure(Exception):
    """A catalog call failed (network error, bad status, unparseable payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class CatalogNotFound(UpstreamFailure):
    """The catalog answered 404 for the requested resource."""


class CatalogClient(ABC):
    """
    Abstract base class for catalog providers.

    Subclasses must implement every listing and detail call below.
    """

    @abstractmethod
    def fetch_group(self, group_id: str) -> SetDetail:
        """Fetch one set with its brief card listing embedded."""

    @abstractmethod
    def fetch_all_groups(self, include_children: bool = False) -> List[SetDetail]:
        """
        Fetch every set, with series names populated.

        Args:
            include_children: Also embed each set's brief card listing (expensive)
        """

    @abstractmethod
    def fetch_detailed(
        self, ids: Sequence[str], cancel: Optional["CancellationToken"] = None
    ) -> List[CardDetail]:
        """
        Fetch full detail for the given card ids. Missing cards are skipped.

        Args:
            cancel: Checked before every card request
        """

    @abstractmethod
    def search_by_name(self, name: str) -> List[CardBrief]:
        """Brief listing of cards whose name matches (partial/fuzzy upstream match)."""

    @abstractmethod
    def search_by_attribute(self, value: str) -> List[CardBrief]:
        """Brief listing of cards with the given rarity (single-valued upstream filter)."""

    @abstractmethod
    def search_by_category(self, value: str) -> List[CardBrief]:
        """Brief listing of cards in the given category (e.g., 'Trainer')."""
