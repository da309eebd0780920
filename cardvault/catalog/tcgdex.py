"""
TCGdex Catalog Client.

API Documentation: https://tcgdex.dev/
Base URL: https://api.tcgdex.net/v2/{language}

- No API key required
- Listings are not paginated: one call returns the whole list
- Set listings omit the series; it is resolved through /series/{id}

Example:
    client = TCGdexClient()
    obsidian = client.fetch_group("sv3")
    cards = client.fetch_detailed([brief.id for brief in obsidian.cards[:5]])
"""
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from curl_cffi import CurlError
from curl_cffi import requests
from pydantic import ValidationError

from cardvault.catalog.client import CatalogClient, CatalogNotFound, UpstreamFailure
from cardvault.config import config
from cardvault.logging import get_logger, log_execution_time
from cardvault.models.catalog import CardBrief, CardDetail, SerieRef, SetDetail

if TYPE_CHECKING:
    from cardvault.hydration.cancellation import CancellationToken

logger = get_logger("tcgdex-client")

RETRYABLE_STATUS = (429, 500, 502, 503)


class TCGdexClient(CatalogClient):
    """
    TCGdex REST adapter over a curl_cffi session.

    Includes automatic retry with exponential backoff for rate limiting (429)
    and transient server errors.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        language: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        detail_batch_size: Optional[int] = None,
        detail_batch_delay: Optional[float] = None,
        session: Optional[Any] = None,
    ):
        self.base_url = (base_url or config.TCGDEX_BASE_URL).rstrip("/")
        self.language = language or config.TCGDEX_LANGUAGE
        self.timeout = timeout if timeout is not None else config.TCGDEX_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else config.TCGDEX_MAX_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else config.TCGDEX_RETRY_DELAY
        self.detail_batch_size = max(1, detail_batch_size or config.DETAIL_BATCH_SIZE)
        self.detail_batch_delay = (
            detail_batch_delay if detail_batch_delay is not None else config.DETAIL_BATCH_DELAY
        )
        self._session = session or requests.Session()
        self._headers = {
            "Accept": "application/json",
            "User-Agent": "cardvault-hydrator/0.1",
        }

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}/{self.language}{endpoint}"

        for attempt in range(self.max_retries + 1):
            try:
                response = self._session.get(
                    url, params=params, headers=self._headers, timeout=self.timeout
                )
            except CurlError as e:
                logger.error(f"TCGdex request failed: {e}", extra={"url": url})
                raise UpstreamFailure(f"TCGdex request failed: {e}", url=url) from e

            status = response.status_code
            if status == 200:
                try:
                    return response.json()
                except ValueError as e:
                    raise UpstreamFailure(
                        f"Failed to parse TCGdex response for {endpoint}", status_code=status, url=url
                    ) from e

            if status == 404:
                raise CatalogNotFound(f"TCGdex resource not found: {endpoint}", status_code=status, url=url)

            if status in RETRYABLE_STATUS and attempt < self.max_retries:
                delay = self.retry_delay * (2 ** attempt)
                logger.warning(
                    f"TCGdex error ({status}), retrying in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries + 1})",
                    extra={"url": url},
                )
                time.sleep(delay)
                continue

            logger.error(f"TCGdex HTTP error: {status}", extra={"url": url, "status_code": status})
            raise UpstreamFailure(f"TCGdex API error: {status} for {endpoint}", status_code=status, url=url)

        # Only reachable with max_retries < 0
        raise UpstreamFailure(f"TCGdex request not attempted: {endpoint}", url=url)

    @staticmethod
    def _parse(model, payload: Any, endpoint: str):
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise UpstreamFailure(f"Unexpected TCGdex payload for {endpoint}: {e.error_count()} errors") from e

    def _parse_briefs(self, payload: Any, endpoint: str) -> List[CardBrief]:
        if isinstance(payload, dict):
            payload = payload.get("cards")
        return [self._parse(CardBrief, item, endpoint) for item in payload or []]

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    def fetch_group(self, group_id: str) -> SetDetail:
        endpoint = f"/sets/{quote(group_id, safe='')}"
        return self._parse(SetDetail, self._get(endpoint), endpoint)

    @log_execution_time(logger)
    def fetch_all_groups(self, include_children: bool = False) -> List[SetDetail]:
        listing = self._get("/sets") or []
        series_by_set = self._series_index()

        groups: List[SetDetail] = []
        for item in listing:
            if include_children:
                try:
                    group = self.fetch_group(item["id"])
                except CatalogNotFound:
                    # Future sets are listed before their data exists
                    logger.warning(f"Set {item['id']} returns 404, skipping", extra={"set_id": item["id"]})
                    continue
            else:
                group = self._parse(SetDetail, item, "/sets")

            if group.serie is None and group.id in series_by_set:
                group = group.model_copy(update={"serie": series_by_set[group.id]})
            groups.append(group)

        logger.info(
            f"Fetched {len(groups)} sets",
            extra={"sets": len(groups), "with_series": sum(1 for g in groups if g.series_name)},
        )
        return groups

    def _series_index(self) -> Dict[str, SerieRef]:
        """Map set id -> series, from /series and each /series/{id}."""
        index: Dict[str, SerieRef] = {}
        for serie in self._get("/series") or []:
            try:
                details = self._get(f"/series/{quote(serie['id'], safe='')}")
            except UpstreamFailure as e:
                logger.warning(f"Failed to fetch series details for {serie.get('id')}: {e}")
                continue
            ref = SerieRef(id=serie["id"], name=details.get("name") or serie.get("name", ""))
            for set_item in details.get("sets") or []:
                index[set_item["id"]] = ref
        return index

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def fetch_detailed(
        self, ids: Sequence[str], cancel: Optional["CancellationToken"] = None
    ) -> List[CardDetail]:
        ids = list(ids)
        details: List[CardDetail] = []
        logger.info(f"Hydrating {len(ids)} cards from TCGdex", extra={"cards": len(ids)})

        for start in range(0, len(ids), self.detail_batch_size):
            for card_id in ids[start:start + self.detail_batch_size]:
                if cancel is not None:
                    cancel.raise_if_cancelled("detail fetch")
                endpoint = f"/cards/{quote(card_id, safe='')}"
                try:
                    payload = self._get(endpoint)
                except CatalogNotFound:
                    logger.warning(f"Card {card_id} not found (404), skipping", extra={"card_id": card_id})
                    continue
                details.append(self._parse(CardDetail, payload, endpoint))

            # Small delay between batches
            if start + self.detail_batch_size < len(ids) and self.detail_batch_delay > 0:
                time.sleep(self.detail_batch_delay)

        return details

    def search_by_name(self, name: str) -> List[CardBrief]:
        return self._parse_briefs(self._get("/cards", params={"name": name}), "/cards")

    def search_by_attribute(self, value: str) -> List[CardBrief]:
        endpoint = f"/rarities/{quote(value, safe='')}"
        return self._parse_briefs(self._get(endpoint), endpoint)

    def search_by_category(self, value: str) -> List[CardBrief]:
        endpoint = f"/categories/{quote(value, safe='')}"
        return self._parse_briefs(self._get(endpoint), endpoint)
