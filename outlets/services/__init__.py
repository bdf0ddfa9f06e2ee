from .rollup import ALL_FARMERS, NO_MATCH, OutletAssignmentResolver, OutletRollup

__all__ = [
    'ALL_FARMERS',
    'NO_MATCH',
    'OutletAssignmentResolver',
    'OutletRollup',
]
