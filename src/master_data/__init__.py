"""
Master data (employees and products) loading and caching
"""
from .models import MasterData, MasterDataError, MasterDataErrorType
from .master_data_cache import MasterDataCache
from .master_data_service import MasterDataService

__all__ = ['MasterData', 'MasterDataError', 'MasterDataErrorType', 'MasterDataCache', 'MasterDataService']
