from .households import Household
from .locations import Location, LocationType, LOCATION_TYPE_LABELS
from .hierarchy import HierarchyRule

__all__ = [
    'Household',
    'Location', 'LocationType', 'LOCATION_TYPE_LABELS',
    'HierarchyRule',
]
