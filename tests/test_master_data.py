"""
Tests for master_data (cache, service, models)

The Sheets API is replaced by MagicMock stores; cache files live in a
temporary directory.
"""
import json
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from master_data.master_data_cache import MasterDataCache
from master_data.master_data_service import MasterDataService, parse_master_rows
from master_data.models import MasterData, MasterDataError, MasterDataErrorType
from sheets.store_errors import (
    MalformedResponseError,
    NetworkError,
    PermissionDeniedError,
    RateLimitedError,
    StoreError,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


SAMPLE = MasterData(employees=['山田 太郎', '鈴木 花子'], products=['ボールペン'])


class TestMasterDataModels(unittest.TestCase):
    def test_membership(self):
        self.assertTrue(SAMPLE.has_employee('山田 太郎'))
        self.assertFalse(SAMPLE.has_employee('山田'))
        self.assertTrue(SAMPLE.has_product('ボールペン'))

    def test_dict_round_trip(self):
        self.assertEqual(MasterData.from_dict(SAMPLE.to_dict()), SAMPLE)

    def test_error_guidance(self):
        error = MasterDataError(MasterDataErrorType.RATE_LIMITED, 'slow down', status=429)
        self.assertTrue(error.can_retry)
        self.assertEqual(error.to_dict()['error_type'], 'RATE_LIMITED')
        self.assertEqual(error.to_dict()['status'], 429)
        self.assertFalse(MasterDataError(MasterDataErrorType.PERMISSION_DENIED, 'no').can_retry)

    def test_every_error_type_has_guidance(self):
        for error_type in MasterDataErrorType:
            error = MasterDataError(error_type, 'x')
            self.assertTrue(error.user_action)


class TestMasterDataCache(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp(prefix='master_data_tests_')
        self.clock = FakeClock()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_empty(self):
        cache = MasterDataCache(ttl_seconds=60, clock=self.clock)
        self.assertIsNone(cache.get())
        self.assertFalse(cache.status()['exists'])

    def test_fresh_entry(self):
        cache = MasterDataCache(ttl_seconds=60, clock=self.clock)
        cache.set(SAMPLE)
        self.clock.now += 59
        self.assertEqual(cache.get(), SAMPLE)
        self.assertTrue(cache.status()['is_valid'])

    def test_expired_entry_cleared(self):
        cache = MasterDataCache(ttl_seconds=60, clock=self.clock)
        cache.set(SAMPLE)
        self.clock.now += 61
        self.assertIsNone(cache.get())
        self.assertFalse(cache.status()['exists'])

    def test_version_mismatch_is_miss(self):
        cache = MasterDataCache(ttl_seconds=60, clock=self.clock)
        cache.set(SAMPLE)
        cache.version = '2.0'
        self.assertIsNone(cache.get())

    def test_clear(self):
        cache = MasterDataCache(ttl_seconds=60, clock=self.clock)
        cache.set(SAMPLE)
        cache.clear()
        self.assertIsNone(cache.get())

    def test_file_persistence(self):
        path = os.path.join(self.tmp_dir, 'cache', 'master.json')
        MasterDataCache(ttl_seconds=60, cache_file=path, clock=self.clock).set(SAMPLE)
        self.assertTrue(os.path.exists(path))

        reloaded = MasterDataCache(ttl_seconds=60, cache_file=path, clock=self.clock)
        self.assertEqual(reloaded.get(), SAMPLE)

        reloaded.clear()
        self.assertFalse(os.path.exists(path))

    def test_corrupt_file_is_miss(self):
        path = os.path.join(self.tmp_dir, 'master.json')
        with open(path, 'w', encoding='utf-8') as f:
            f.write('{not json')
        cache = MasterDataCache(ttl_seconds=60, cache_file=path, clock=self.clock)
        self.assertIsNone(cache.get())

    def test_file_without_data_is_miss(self):
        path = os.path.join(self.tmp_dir, 'master.json')
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({'timestamp': 1000.0}, f)
        cache = MasterDataCache(ttl_seconds=60, cache_file=path, clock=self.clock)
        self.assertIsNone(cache.get())


class TestParseMasterRows(unittest.TestCase):
    def test_columns_split_and_cleaned(self):
        rows = [
            ['山田 太郎', 'ボールペン'],
            [' 鈴木 花子 ', ''],
            ['', 'クリアファイル'],
            ['佐藤 次郎', 'ボールペン'],
            [],
            ['田中 一郎'],
        ]
        data = parse_master_rows(rows)
        self.assertEqual(data.employees, ['山田 太郎', '鈴木 花子', '佐藤 次郎', '田中 一郎'])
        self.assertEqual(data.products, ['ボールペン', 'クリアファイル'])


class TestMasterDataService(unittest.TestCase):
    def setUp(self):
        self.store = MagicMock()
        self.store.read_column_range.return_value = [['山田 太郎', 'ボールペン'], ['鈴木 花子', '']]
        self.cache = MasterDataCache(ttl_seconds=60, clock=FakeClock())
        self.service = MasterDataService(self.store, cache=self.cache, sheet_name='管理', data_range='A:B')

    def test_loads_from_sheet(self):
        data = self.service.get_master_data()
        self.assertEqual(data.employees, ['山田 太郎', '鈴木 花子'])
        self.assertEqual(data.products, ['ボールペン'])
        self.store.read_column_range.assert_called_once_with('管理', 'A:B')

    def test_second_call_served_from_cache(self):
        self.service.get_master_data()
        self.service.get_master_data()
        self.assertEqual(self.store.read_column_range.call_count, 1)

    def test_force_refresh_bypasses_cache(self):
        self.service.get_master_data()
        self.service.get_master_data(force_refresh=True)
        self.assertEqual(self.store.read_column_range.call_count, 2)

    def test_refresh(self):
        self.service.get_master_data()
        self.store.read_column_range.return_value = [['新人 一号', 'ノート']]
        data = self.service.refresh()
        self.assertEqual(data.employees, ['新人 一号'])
        self.assertEqual(self.cache.get(), data)

    def test_empty_sheet(self):
        self.store.read_column_range.return_value = []
        with self.assertRaises(MasterDataError) as ctx:
            self.service.get_master_data()
        self.assertEqual(ctx.exception.error_type, MasterDataErrorType.EMPTY_DATA)

    def test_blank_rows_only(self):
        self.store.read_column_range.return_value = [['', ''], ['  ']]
        with self.assertRaises(MasterDataError) as ctx:
            self.service.get_master_data()
        self.assertEqual(ctx.exception.error_type, MasterDataErrorType.EMPTY_DATA)

    def test_store_errors_translated(self):
        cases = [
            (RateLimitedError('x', status=429), MasterDataErrorType.RATE_LIMITED),
            (PermissionDeniedError('x', status=403), MasterDataErrorType.PERMISSION_DENIED),
            (NetworkError('x'), MasterDataErrorType.NETWORK_ERROR),
            (MalformedResponseError('x'), MasterDataErrorType.INVALID_RESPONSE),
            (StoreError('x', status=400), MasterDataErrorType.CONFIG_ERROR),
        ]
        for error, expected in cases:
            self.store.read_column_range.side_effect = error
            with self.assertRaises(MasterDataError) as ctx:
                self.service.get_master_data()
            self.assertEqual(ctx.exception.error_type, expected)
            self.assertEqual(ctx.exception.status, error.status)

    def test_failed_load_not_cached(self):
        self.store.read_column_range.side_effect = NetworkError('down')
        with self.assertRaises(MasterDataError):
            self.service.get_master_data()
        self.assertIsNone(self.cache.get())


if __name__ == '__main__':
    unittest.main()
