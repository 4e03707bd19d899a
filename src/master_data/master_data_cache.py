"""
Master Data Cache
TTL cache for the employee/product lists, optionally mirrored to a JSON file
so a restarted process does not hit the Sheets API straight away.

One instance is created at startup and passed to whoever needs it.
"""
import json
import time
from pathlib import Path
from typing import Callable, Dict, Optional

import config
from master_data.models import MasterData
from utils.logger import get_logger


class MasterDataCache:
    """Read-through cache entry with TTL and version check."""

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        cache_file: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = config.MASTER_DATA_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self.version = config.MASTER_DATA_CACHE_VERSION
        self.cache_file = Path(cache_file) if cache_file else None
        self._clock = clock
        self._entry: Optional[Dict] = None
        self.logger = get_logger()

        if self.cache_file is not None:
            self._entry = self._load_file()

    def get(self) -> Optional[MasterData]:
        """Return cached master data, or None if missing, stale or from an old version."""
        entry = self._entry
        if entry is None:
            return None
        if entry.get('version') != self.version or self._age(entry) > self.ttl_seconds:
            self.clear()
            return None
        return MasterData.from_dict(entry['data'])

    def set(self, data: MasterData) -> None:
        self._entry = {
            'data': data.to_dict(),
            'timestamp': self._clock(),
            'version': self.version,
        }
        if self.cache_file is not None:
            try:
                self.cache_file.parent.mkdir(parents=True, exist_ok=True)
                self.cache_file.write_text(json.dumps(self._entry, ensure_ascii=False), encoding='utf-8')
            except OSError as e:
                self.logger.warning(f"Could not write cache file {self.cache_file}: {e}", component="MasterDataCache")

    def clear(self) -> None:
        self._entry = None
        if self.cache_file is not None and self.cache_file.exists():
            try:
                self.cache_file.unlink()
            except OSError as e:
                self.logger.warning(f"Could not remove cache file {self.cache_file}: {e}", component="MasterDataCache")

    def status(self) -> Dict:
        """Cache state for health reporting."""
        entry = self._entry
        if entry is None:
            return {'exists': False, 'age_seconds': 0.0, 'is_valid': False}
        age = self._age(entry)
        return {
            'exists': True,
            'age_seconds': round(age, 1),
            'is_valid': entry.get('version') == self.version and age <= self.ttl_seconds,
        }

    def _age(self, entry: Dict) -> float:
        return self._clock() - float(entry.get('timestamp', 0))

    def _load_file(self) -> Optional[Dict]:
        if not self.cache_file.exists():
            return None
        try:
            entry = json.loads(self.cache_file.read_text(encoding='utf-8'))
            if not isinstance(entry, dict) or 'data' not in entry:
                raise ValueError("missing 'data'")
            return entry
        except (OSError, ValueError) as e:
            # A corrupt cache is only a cache miss
            self.logger.warning(f"Discarding unreadable cache file {self.cache_file}: {e}", component="MasterDataCache")
            return None
