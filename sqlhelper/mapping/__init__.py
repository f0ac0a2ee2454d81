# ==============================================
# MAPPING: query results <-> model instances
# ==============================================

from .row_mapper import convert_value, default_instance, map_row, map_rows
from .tabular import TabularResult

__all__ = [
    "TabularResult",
    "convert_value",
    "default_instance",
    "map_row",
    "map_rows",
]
