"""Adapters layer - Infrastructure implementations for instance operations.

- LMDeviceDatasourceAPI: LogicMonitor REST implementation of IDeviceDatasourceAPI
- DatasourceFieldMapper: Field mapping implementation of IFieldMapper
"""

from .field_mapper import DatasourceFieldMapper
from .lm_api_adapter import LMDeviceDatasourceAPI

__all__ = [
    "DatasourceFieldMapper",
    "LMDeviceDatasourceAPI",
]
