"""
app/mappers package marker.
"""

from app.mappers.record_mapper import INCOME_GROUP_SOURCES, REGION_SOURCES, RecordMapper

__all__ = [
    "INCOME_GROUP_SOURCES",
    "REGION_SOURCES",
    "RecordMapper",
]
