"""
Master Data Models
Employee/product lists and the typed error raised while loading them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class MasterData:
    employees: List[str] = field(default_factory=list)
    products: List[str] = field(default_factory=list)

    def has_employee(self, name: str) -> bool:
        return name in self.employees

    def has_product(self, name: str) -> bool:
        return name in self.products

    def to_dict(self) -> Dict[str, List[str]]:
        return {'employees': list(self.employees), 'products': list(self.products)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MasterData':
        return cls(
            employees=[str(e) for e in data.get('employees') or []],
            products=[str(p) for p in data.get('products') or []],
        )


class MasterDataErrorType(Enum):
    RATE_LIMITED = 'RATE_LIMITED'
    UNAUTHORIZED = 'UNAUTHORIZED'
    PERMISSION_DENIED = 'PERMISSION_DENIED'
    NOT_FOUND = 'NOT_FOUND'
    EMPTY_DATA = 'EMPTY_DATA'
    NETWORK_ERROR = 'NETWORK_ERROR'
    INVALID_RESPONSE = 'INVALID_RESPONSE'
    CONFIG_ERROR = 'CONFIG_ERROR'


# (can_retry, recommended user action)
_ERROR_GUIDANCE = {
    MasterDataErrorType.RATE_LIMITED: (True, 'Wait a minute and try again'),
    MasterDataErrorType.UNAUTHORIZED: (False, 'Sign in again'),
    MasterDataErrorType.PERMISSION_DENIED: (False, 'Share the spreadsheet with the service account'),
    MasterDataErrorType.NOT_FOUND: (False, 'Check the spreadsheet ID and the master tab name'),
    MasterDataErrorType.EMPTY_DATA: (False, 'Add employees and products to the master tab'),
    MasterDataErrorType.NETWORK_ERROR: (True, 'Check the network connection and try again'),
    MasterDataErrorType.INVALID_RESPONSE: (True, 'Try again; contact support if it persists'),
    MasterDataErrorType.CONFIG_ERROR: (True, 'Reload the application and try again'),
}


class MasterDataError(Exception):
    """Loading the master lists failed."""

    def __init__(self, error_type: MasterDataErrorType, message: str,
                 status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.error_type = error_type
        self.status = status
        self.details = details
        self.can_retry, self.user_action = _ERROR_GUIDANCE[error_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'error_type': self.error_type.value,
            'message': str(self),
            'status': self.status,
            'can_retry': self.can_retry,
            'user_action': self.user_action,
        }
