"""
Map Coordinate Module

Provides:
- Per-map affine transforms from game units to normalized minimap space
- Minimap image URLs

Coordinate systems:
- Match files record kill positions in game units (x, y)
- Minimap images are addressed in normalized [0, 1] coordinates
- The game's axes are swapped on the minimap:
    nx = y * x_multiplier + x_scalar_to_add
    ny = x * y_multiplier + y_scalar_to_add

Positions equal to 0 or -999 on either axis are placeholders written when
the real position is unknown and have no minimap projection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAP_ICON_URL = "https://media.valorant-api.com/maps/{uuid}/displayicon.png"
FALLBACK_MAP = "Ascent"

# Placeholder values written for missing coordinates
_SENTINEL_COORDINATES = frozenset({0, -999})


@dataclass(frozen=True)
class MapTransform:
    """Affine transform parameters for one map."""

    name: str
    uuid: str
    x_multiplier: float
    y_multiplier: float
    x_scalar_to_add: float
    y_scalar_to_add: float

    @property
    def image_url(self) -> str:
        return MAP_ICON_URL.format(uuid=self.uuid)

    def to_normalized(self, x: float, y: float) -> tuple[float, float]:
        """Project game units onto the minimap, clamped to [0, 1]."""
        nx = y * self.x_multiplier + self.x_scalar_to_add
        ny = x * self.y_multiplier + self.y_scalar_to_add
        return _clamp(nx), _clamp(ny)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


# ============================================================================
# MAP METADATA
# ============================================================================

MAP_TRANSFORMS: dict[str, MapTransform] = {
    t.name: t
    for t in (
        MapTransform("Abyss", "224b0a95-48b9-f703-1bd8-67aca101a61f", 0.000081, -0.000081, 0.5, 0.5),
        MapTransform("Ascent", "7eaecc1b-4337-bbf6-6ab9-04b8f06b3319", 0.00007, -0.00007, 0.813895, 0.573242),
        MapTransform("Bind", "2c9d57ec-4431-9c5e-2939-8f9ef6dd5cba", 0.000059, -0.000059, 0.576941, 0.967566),
        MapTransform("Breeze", "2fb9a4fd-47b8-4e7d-a969-74b4046ebd53", 0.00007, -0.00007, 0.465123, 0.833078),
        MapTransform("Corrode", "1c18ab1f-420d-0d8b-71d0-77ad3c439115", 0.00007, -0.00007, 0.526158, 0.5),
        MapTransform("Fracture", "b529448b-4d60-346e-e89e-00a4c527a405", 0.000078, -0.000078, 0.556952, 1.155886),
        MapTransform("Haven", "2bee0dc9-4ffe-519b-1cbd-7fbe763a6047", 0.000075, -0.000075, 1.09345, 0.642728),
        MapTransform("Icebox", "e2ad5c54-4114-a870-9641-8ea21279579a", 0.000072, -0.000072, 0.460214, 0.304687),
        MapTransform("Lotus", "2fe4ed3a-450a-948b-6d6b-e89a78e680a9", 0.000072, -0.000072, 0.454789, 0.917752),
        MapTransform("Pearl", "fd267378-4d1d-484f-ff52-77821ed10dc2", 0.000078, -0.000078, 0.480469, 0.916016),
        MapTransform("Split", "d960549e-485c-e861-8d71-aa9d1aed12a2", 0.000078, -0.000078, 0.842188, 0.697578),
        MapTransform("Sunset", "92584fbe-486a-b1b2-9faa-39b0f486b498", 0.000078, -0.000078, 0.5, 0.515625),
        MapTransform("Triad", "9c91a445-4f78-1baa-a3ea-8f8aadf4914d", 0.000063, -0.000063, 0.5, 0.5),
    )
}


def get_map_transform(map_name: str) -> MapTransform | None:
    """Look up a map's transform by name (case-insensitive)."""
    transform = MAP_TRANSFORMS.get(map_name)
    if transform is not None:
        return transform
    lowered = map_name.lower()
    for name, candidate in MAP_TRANSFORMS.items():
        if name.lower() == lowered:
            return candidate
    return None


def transform_coordinates(x: float, y: float, map_name: str) -> tuple[float, float] | None:
    """
    Convert a game position to normalized minimap coordinates.

    Args:
        x: Game X coordinate
        y: Game Y coordinate
        map_name: Display name of the map (e.g. "Ascent")

    Returns:
        (nx, ny) in [0, 1], or None for an unknown map or placeholder position
    """
    if x in _SENTINEL_COORDINATES or y in _SENTINEL_COORDINATES:
        return None

    transform = get_map_transform(map_name)
    if transform is None:
        logger.debug(f"No coordinate transform for map: {map_name}")
        return None

    return transform.to_normalized(x, y)


def available_maps() -> list[str]:
    """Get list of maps with coordinate transforms."""
    return sorted(MAP_TRANSFORMS)


def map_image_url(map_name: str) -> str:
    """Minimap image URL for a map, falling back to Ascent for unknown maps."""
    transform = get_map_transform(map_name) or MAP_TRANSFORMS[FALLBACK_MAP]
    return transform.image_url
