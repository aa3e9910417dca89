"""
State behind one list view: fetched records, search/sort/page inputs and
the loading/error flags the page shows while data is in flight.
"""
import threading
from typing import Any, Dict, List, Optional

from app.core.logger import logger
from app.services.backend_api import BackendAPIClient, BackendAPIError
from app.services.domains import DomainConfig
from app.services.list_view import (
    Page,
    SortSpec,
    ViewResult,
    clamp_page,
    toggle_sort,
    view,
)


class RequestFence:
    """
    Hands out increasing tickets; only the newest ticket may write state,
    so a slow earlier response cannot replace a newer one.
    """

    def __init__(self) -> None:
        self._latest = 0
        self._lock = threading.Lock()

    def begin(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest


class ListController:
    def __init__(
        self,
        domain: DomainConfig,
        client: BackendAPIClient,
        page_size: Optional[int] = None
    ):
        self.domain = domain
        self.client = client

        self.records: List[Dict[str, Any]] = []
        self.query = ""
        self.sort: Optional[SortSpec] = None
        self.filters: Dict[str, Optional[str]] = {}
        self.page_number = 1
        self.page_size = domain.normalize_page_size(page_size)

        self.loading = False
        self.error: Optional[str] = None
        self.fence = RequestFence()

    # =====================================================
    # FETCH
    # =====================================================

    def _fetch(self) -> List[Dict[str, Any]]:
        if self.domain.text_source:
            return self.client.get_log_entries(self.domain.list_endpoint)
        return self.client.get_collection(self.domain.list_endpoint, self.domain.envelope_keys)

    def begin_load(self) -> int:
        self.loading = True
        self.error = None
        return self.fence.begin()

    def finish_load(self, ticket: int, records: Optional[List[Dict[str, Any]]] = None,
                    error: Optional[str] = None) -> bool:
        if not self.fence.is_current(ticket):
            logger.info(f"STALE RESPONSE DROPPED | domain={self.domain.name} | ticket={ticket}")
            return False

        if error is not None:
            self.error = error
        else:
            self.records = list(records or [])
            self.page_number = clamp_page(self.page_number, self._filtered_count(), self.page_size)

        self.loading = False
        return True

    def load(self) -> bool:
        ticket = self.begin_load()
        try:
            records = self._fetch()
        except BackendAPIError as e:
            logger.warning(f"LIST LOAD FAILED | domain={self.domain.name} | error={e.message}")
            return self.finish_load(ticket, error=e.message)
        return self.finish_load(ticket, records=records)

    def retry(self) -> bool:
        return self.load()

    # =====================================================
    # USER INPUT
    # =====================================================

    def search(self, query: str) -> None:
        self.query = query or ""
        self.page_number = clamp_page(self.page_number, self._filtered_count(), self.page_size)

    def sort_by(self, field: str) -> SortSpec:
        self.sort = toggle_sort(self.sort, field)
        self.page_number = 1
        return self.sort

    def set_sort(self, sort: Optional[SortSpec]) -> None:
        self.sort = sort

    def set_filter(self, field: str, value: Optional[str]) -> None:
        if field not in self.domain.filter_fields:
            return
        self.filters[field] = value
        self.page_number = clamp_page(self.page_number, self._filtered_count(), self.page_size)

    def set_page_size(self, size: int) -> None:
        self.page_size = self.domain.normalize_page_size(size)
        self.page_number = 1

    def go_to(self, page_number: int) -> int:
        self.page_number = clamp_page(page_number, self._filtered_count(), self.page_size)
        return self.page_number

    def delete(self, record_id: str) -> bool:
        endpoint = self.domain.delete_url(record_id)
        if endpoint is None:
            raise BackendAPIError(f"{self.domain.label} cannot be deleted", status_code=405)

        self.client.delete(endpoint)
        logger.info(f"RECORD DELETED | domain={self.domain.name} | id={record_id}")

        # full re-fetch, the backend stays the source of truth
        return self.load()

    def decide(self, record_id: str, action: str, reason: Optional[str] = None) -> bool:
        flow = self.domain.approval
        if flow is None:
            raise BackendAPIError(f"{self.domain.label} have no approval workflow", status_code=405)

        self.client.post(flow.decision_endpoint, flow.body(record_id, action, reason))
        logger.info(f"CHANGE {action} | domain={self.domain.name} | id={record_id}")

        return self.load()

    # =====================================================
    # OUTPUT
    # =====================================================

    def _view(self, page: Page) -> ViewResult:
        return view(
            self.records,
            self.query,
            self.sort,
            page,
            self.domain.search_fields,
            self.domain.sortable_fields,
            stringifiers=self.domain.stringifiers,
            filters=self.filters
        )

    def _filtered_count(self) -> int:
        return self._view(Page(1, self.page_size)).total_items

    def render(self) -> ViewResult:
        self.page_number = clamp_page(self.page_number, self._filtered_count(), self.page_size)
        return self._view(Page(self.page_number, self.page_size))
