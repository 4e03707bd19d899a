"""
Master Data Service
Loads employee names (column A) and product names (column B) from the
master tab, through the injected cache.
"""
from typing import List, Optional

import config
from master_data.master_data_cache import MasterDataCache
from master_data.models import MasterData, MasterDataError, MasterDataErrorType
from sheets.store_errors import (
    MalformedResponseError,
    NetworkError,
    PermissionDeniedError,
    RateLimitedError,
    SheetNotFoundError,
    StoreError,
    UnauthorizedError,
)
from utils.logger import get_logger


_STORE_ERROR_TYPES = [
    (UnauthorizedError, MasterDataErrorType.UNAUTHORIZED),
    (PermissionDeniedError, MasterDataErrorType.PERMISSION_DENIED),
    (SheetNotFoundError, MasterDataErrorType.NOT_FOUND),
    (RateLimitedError, MasterDataErrorType.RATE_LIMITED),
    (NetworkError, MasterDataErrorType.NETWORK_ERROR),
    (MalformedResponseError, MasterDataErrorType.INVALID_RESPONSE),
]


def parse_master_rows(rows: List[List[str]]) -> MasterData:
    """
    Split master-tab rows into employees and products.

    Blank cells are skipped, values trimmed; products are de-duplicated
    keeping first-seen order.
    """
    employees = []
    products = []
    seen_products = set()
    for row in rows:
        if len(row) > 0 and str(row[0]).strip():
            employees.append(str(row[0]).strip())
        if len(row) > 1 and str(row[1]).strip():
            product = str(row[1]).strip()
            if product not in seen_products:
                seen_products.add(product)
                products.append(product)
    return MasterData(employees=employees, products=products)


class MasterDataService:
    """Read-through access to the master lists."""

    def __init__(self, store, cache: Optional[MasterDataCache] = None,
                 sheet_name: Optional[str] = None, data_range: Optional[str] = None):
        self.store = store
        self.cache = cache or MasterDataCache()
        self.sheet_name = sheet_name or config.MASTER_SHEET_NAME
        self.data_range = data_range or config.MASTER_DATA_RANGE
        self.logger = get_logger()

    def get_master_data(self, force_refresh: bool = False) -> MasterData:
        """
        Return master data from cache, loading it from the sheet on a miss.

        Raises:
            MasterDataError: loading failed or the tab holds no data
        """
        if not force_refresh:
            cached = self.cache.get()
            if cached is not None:
                return cached

        data = self._fetch()
        self.cache.set(data)
        return data

    def refresh(self) -> MasterData:
        """Drop the cached copy and reload from the sheet."""
        self.cache.clear()
        return self.get_master_data(force_refresh=True)

    def _fetch(self) -> MasterData:
        try:
            rows = self.store.read_column_range(self.sheet_name, self.data_range)
        except StoreError as e:
            raise self._translate(e) from e

        if not rows:
            raise MasterDataError(
                MasterDataErrorType.EMPTY_DATA,
                f"Master tab '{self.sheet_name}' is empty",
            )

        data = parse_master_rows(rows)
        if not data.employees and not data.products:
            raise MasterDataError(
                MasterDataErrorType.EMPTY_DATA,
                f"Master tab '{self.sheet_name}' has no employees or products",
            )

        self.logger.info(
            f"Loaded master data: {len(data.employees)} employees, {len(data.products)} products",
            component="MasterData"
        )
        return data

    def _translate(self, error: StoreError) -> MasterDataError:
        for error_cls, error_type in _STORE_ERROR_TYPES:
            if isinstance(error, error_cls):
                break
        else:
            error_type = MasterDataErrorType.CONFIG_ERROR
        self.logger.error(f"Master data load failed: {error}", component="MasterData")
        return MasterDataError(error_type, str(error), status=error.status)
