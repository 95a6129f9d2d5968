"""
Personality insights session backend: analyze text, store it per session,
and render the stored profile as a description feed or a trait chart.
"""

from .charts import ChartSlice, build_chart, find_node
from .flatten import DisplayItem, flatten_profile, format_percentage
from .profile import ProfileNode, parse_profile

__all__ = [
    'ChartSlice',
    'DisplayItem',
    'ProfileNode',
    'build_chart',
    'find_node',
    'flatten_profile',
    'format_percentage',
    'parse_profile',
]
