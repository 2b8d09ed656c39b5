"""
Terrain object placement using a blue noise point set

Placement is keyed on the noise-space position of each point, so objects
stay put while the sampler origin slides and change along with the terrain
when the sampler rotates.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from terrastream.constants import ObjectCategory, TerrainSettings
from terrastream.chunk import terrain_height
from terrastream.noise_field import NoiseField
from terrastream.sampler import QuadrantSampler, StaleRegion

logger = logging.getLogger(__name__)

_HASH_VECTOR = np.array([127.1, 311.7, 74.7])
_HASH_SCALE = 43758.545

_OFFSET_X = np.array([1.0, 0.0, 0.0])
_OFFSET_Y = np.array([0.0, 1.0, 0.0])
_OFFSET_Z = np.array([0.0, 0.0, 1.0])

TREES = (
    "Pine_1", "Pine_2", "Pine_3", "Pine_4", "Pine_5",
    "CommonTree_1", "CommonTree_2", "CommonTree_3", "CommonTree_4", "CommonTree_5",
)

DEAD_TREES = ("DeadTree_1", "DeadTree_2", "DeadTree_3", "DeadTree_4", "DeadTree_5")

ROCKS = ("Rock_Medium_1", "Rock_Medium_2", "Rock_Medium_3")

GROUND_COVER = (
    "Grass_Wispy_Short", "Grass_Wispy_Tall", "Grass_Common_Short", "Grass_Common_Tall",
    "Flower_3_Single", "Flower_3_Group", "Flower_4_Single", "Flower_4_Group",
    "Mushroom_Common", "Mushroom_Laetiporus", "Fern_1",
    "Plant_1", "Plant_1_Big", "Plant_7", "Plant_7_Big",
    "Clover_1", "Clover_2", "Bush_Common", "Bush_Common_Flowers",
    "Pebble_Round_1", "Pebble_Round_2", "Pebble_Round_3", "Pebble_Round_4", "Pebble_Round_5",
    "Pebble_Square_1", "Pebble_Square_2", "Pebble_Square_3", "Pebble_Square_4",
    "Pebble_Square_5", "Pebble_Square_6",
)

DEFAULT_CATALOGUE = {
    ObjectCategory.DEAD_TREE: DEAD_TREES,
    ObjectCategory.ROCK: ROCKS,
    ObjectCategory.TREE: TREES,
    ObjectCategory.GROUND_COVER: GROUND_COVER,
}


def poisson_disk_points(min_distance: float, seed: int = 42, max_attempts: int = 30) -> List[Tuple[float, float]]:
    """
    Bridson's Poisson disk sampling in the unit square

    Args:
        min_distance: Minimum distance between any two points
        seed: Seed for the point set
        max_attempts: Candidates per active point before it is retired

    Returns:
        List of (u, v) points in [0, 1)
    """
    rng = np.random.default_rng(seed)
    cell_size = min_distance / math.sqrt(2.0)
    grid: Dict[Tuple[int, int], int] = {}  # (gx, gy) -> point index

    first = (float(rng.uniform(0.0, 1.0)), float(rng.uniform(0.0, 1.0)))
    points = [first]
    active = [0]
    grid[(int(first[0] / cell_size), int(first[1] / cell_size))] = 0

    while active:
        slot = int(rng.integers(len(active)))
        px, py = points[active[slot]]
        found = False

        for _ in range(max_attempts):
            angle = rng.uniform(0.0, 2.0 * math.pi)
            dist = rng.uniform(min_distance, 2.0 * min_distance)
            nx = px + dist * math.cos(angle)
            ny = py + dist * math.sin(angle)
            if nx < 0.0 or nx >= 1.0 or ny < 0.0 or ny >= 1.0:
                continue

            gx = int(nx / cell_size)
            gy = int(ny / cell_size)
            too_close = False
            for dx in range(-2, 3):
                for dy in range(-2, 3):
                    other = grid.get((gx + dx, gy + dy))
                    if other is None:
                        continue
                    ox, oy = points[other]
                    if (nx - ox) ** 2 + (ny - oy) ** 2 < min_distance ** 2:
                        too_close = True
                        break
                if too_close:
                    break

            if not too_close:
                grid[(gx, gy)] = len(points)
                active.append(len(points))
                points.append((float(nx), float(ny)))
                found = True
                break

        if not found:
            active.pop(slot)

    return points


def hash_point(p: np.ndarray) -> float:
    """Deterministic value in [0, 1) for a noise-space point"""
    value = math.sin(float(np.dot(p, _HASH_VECTOR))) * _HASH_SCALE
    return abs(math.modf(value)[0])


def pick_index(count: int, frac: float) -> int:
    """Map a value in [0, 1) onto a list index"""
    return min(int(frac * count), count - 1)


def classify(p: np.ndarray) -> Optional[Tuple[ObjectCategory, float]]:
    """
    Pick the object category for a noise-space point

    Args:
        p: Noise-space point

    Returns:
        Tuple of (category, variant hash), or None when nothing is placed
    """
    t = hash_point(p)
    if 0.998 < t < 1.0:
        return ObjectCategory.DEAD_TREE, hash_point(p + _OFFSET_X)
    if t > 0.995:
        return ObjectCategory.ROCK, hash_point(p + _OFFSET_Y)
    if t > 0.985:
        return ObjectCategory.TREE, hash_point(p + _OFFSET_X)
    if t > 0.93:
        return ObjectCategory.GROUND_COVER, hash_point(p + _OFFSET_Z)
    return None


class Placement:
    """A single object placed on the terrain"""

    def __init__(self, category: ObjectCategory, variant: int, asset: str,
                 x: float, y: float, z: float):
        self.category = category
        self.variant = variant
        self.asset = asset
        self.x = x
        self.y = y
        self.z = z

    def __eq__(self, other) -> bool:
        if not isinstance(other, Placement):
            return NotImplemented
        return (self.category, self.variant, self.asset, self.x, self.y, self.z) == \
            (other.category, other.variant, other.asset, other.x, other.y, other.z)

    def __repr__(self) -> str:
        return f"Placement({self.category.name}, {self.asset}, ({self.x:.2f}, {self.y:.2f}, {self.z:.2f}))"


class ObjectScatterer:
    """Places vegetation and rocks on chunks from one shared blue noise set"""

    def __init__(self, points: Sequence[Tuple[float, float]],
                 catalogue: Optional[Dict[ObjectCategory, Sequence[str]]] = None):
        """
        Initialize the scatterer

        Args:
            points: Blue noise points in the unit square
            catalogue: Asset names per category
        """
        self.points = list(points)
        self.catalogue = dict(catalogue or DEFAULT_CATALOGUE)

    @classmethod
    def from_settings(cls, settings: TerrainSettings) -> "ObjectScatterer":
        points = poisson_disk_points(settings.blue_noise_radius, settings.blue_noise_seed)
        logger.debug("Generated %d blue noise points (radius %.3f)", len(points), settings.blue_noise_radius)
        return cls(points)

    def scatter(self, grid_x: int, grid_z: int, settings: TerrainSettings, noise: NoiseField,
                sampler: QuadrantSampler, stale: Optional[StaleRegion] = None) -> List[Placement]:
        """
        Place objects on one chunk

        Args:
            grid_x: Chunk x-coordinate
            grid_z: Chunk z-coordinate
            settings: Terrain settings
            noise: Noise field
            sampler: Live sampler
            stale: Active stale region, if any

        Returns:
            Placements in blue noise point order
        """
        size = settings.chunk_size
        origin_x = grid_x * size
        origin_z = grid_z * size
        placements = []

        for u, v in self.points:
            wx = origin_x + u * size
            wz = origin_z + v * size

            choice = classify(sampler.noise_point(wx, wz, settings.noise_scale))
            if choice is None:
                continue
            category, frac = choice
            variants = self.catalogue[category]
            variant = pick_index(len(variants), frac)

            height = terrain_height(wx, wz, noise, sampler, settings.amplitude,
                                    settings.noise_scale, size, stale)
            placements.append(Placement(category, variant, variants[variant], wx, height, wz))

        return placements
