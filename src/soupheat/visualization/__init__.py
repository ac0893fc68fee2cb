"""
SoupHeat Visualization - heatmap data for minimap overlays.

This module contains:
- radar: Per-map coordinate transforms and minimap images
- heatmaps: Kill event filters and heatmap point generation
"""

from soupheat.visualization.heatmaps import (
    HeatmapFilters,
    HeatmapPoint,
    filter_kill_events,
    filter_options,
    generate_kill_heatmap,
)
from soupheat.visualization.radar import (
    MAP_TRANSFORMS,
    MapTransform,
    available_maps,
    map_image_url,
    transform_coordinates,
)

__all__ = [
    "HeatmapFilters",
    "HeatmapPoint",
    "MAP_TRANSFORMS",
    "MapTransform",
    "available_maps",
    "filter_kill_events",
    "filter_options",
    "generate_kill_heatmap",
    "map_image_url",
    "transform_coordinates",
]
