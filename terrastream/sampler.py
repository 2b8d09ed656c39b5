"""
Quadrant noise sampler and stale-region blending

The sampler maps world (x, z) positions into 3D noise space through two
planes that meet along a shared seam. Points left of the seam use the
(left_axis, center_axis) plane and points right of it use the
(center_axis, right_axis) plane, so center_axis is sampled along the seam
and the height field stays continuous across it. Rotating the sampler keeps
exactly one plane's axes so the quadrant still in view keeps its heights.
"""
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from terrastream.constants import Quadrant, VisibleAxis

# Squared length below which a random candidate vector is redrawn
_MIN_LENGTH_SQ = 0.01


def random_unit_vector(rng: np.random.Generator) -> np.ndarray:
    """
    Draw a random unit vector by rejection sampling the unit cube

    Args:
        rng: Random generator to draw from

    Returns:
        A normalized 3D vector
    """
    while True:
        v = rng.uniform(-1.0, 1.0, size=3)
        length_sq = float(np.dot(v, v))
        if length_sq > _MIN_LENGTH_SQ:
            return v / math.sqrt(length_sq)


def random_orthogonal_axis(axis: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """
    Draw a random unit vector orthogonal to the given unit axis

    Args:
        axis: Unit vector the result must be orthogonal to
        rng: Random generator to draw from

    Returns:
        A normalized 3D vector with zero dot product against axis
    """
    while True:
        v = random_unit_vector(rng)
        projected = v - np.dot(v, axis) * axis
        length_sq = float(np.dot(projected, projected))
        if length_sq > _MIN_LENGTH_SQ:
            return projected / math.sqrt(length_sq)


def _snap_down(value: float, step: float) -> float:
    return math.floor(value / step) * step


def _dot2(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return a[0] * b[0] + a[1] * b[1]


class QuadrantSampler:
    """Samples two visible quadrants from two adjoining planes in noise space"""

    def __init__(self, visible_axis: VisibleAxis = VisibleAxis.NORTH,
                 left_axis=(-1.0, 0.0, 0.0), center_axis=(0.0, 0.0, 1.0),
                 right_axis=(1.0, 0.0, 0.0), noise_origin=(0.0, 0.0, 0.0),
                 quadrant_origin=(0.0, 0.0)):
        """
        Initialize a sampler

        Args:
            visible_axis: World direction currently in view
            left_axis: Noise-space across axis of the left quadrant
            center_axis: Noise-space axis sampled along the seam
            right_axis: Noise-space across axis of the right quadrant
            noise_origin: Noise-space point at the quadrant origin
            quadrant_origin: World (x, z) point where the four quadrants meet
        """
        self.visible_axis = visible_axis
        self.left_axis = np.array(left_axis, dtype=np.float64)
        self.center_axis = np.array(center_axis, dtype=np.float64)
        self.right_axis = np.array(right_axis, dtype=np.float64)
        self.noise_origin = np.array(noise_origin, dtype=np.float64)
        self.quadrant_origin = (float(quadrant_origin[0]), float(quadrant_origin[1]))

    def copy(self) -> "QuadrantSampler":
        """Independent snapshot of this sampler"""
        return QuadrantSampler(
            self.visible_axis, self.left_axis, self.center_axis,
            self.right_axis, self.noise_origin, self.quadrant_origin
        )

    def noise_point(self, wx: float, wz: float, scale: float) -> np.ndarray:
        """
        Map a world-space position to a noise-space coordinate

        Args:
            wx: World x-coordinate
            wz: World z-coordinate
            scale: World units to noise units

        Returns:
            The 3D noise-space point
        """
        d = (wx - self.quadrant_origin[0], wz - self.quadrant_origin[1])
        along = _dot2(d, self.visible_axis.dir_2d())
        lateral = _dot2(d, self.visible_axis.left().dir_2d())

        if lateral >= 0.0:
            across = (lateral * scale) * self.left_axis
        else:
            across = (-lateral * scale) * self.right_axis

        return self.noise_origin + (along * scale) * self.center_axis + across

    def quadrant_at(self, wx: float, wz: float) -> Quadrant:
        """
        Get the named quadrant containing a world point

        Args:
            wx: World x-coordinate
            wz: World z-coordinate

        Returns:
            The quadrant around the current origin
        """
        north = wz >= self.quadrant_origin[1]
        east = wx >= self.quadrant_origin[0]
        if north:
            return Quadrant.NORTH_EAST if east else Quadrant.NORTH_WEST
        return Quadrant.SOUTH_EAST if east else Quadrant.SOUTH_WEST

    def slide_origin(self, observer_xz: Tuple[float, float], chunk_size: float,
                     scale: float) -> float:
        """
        Snap the quadrant origin to the chunk boundary just behind the observer

        The noise origin moves by the same amount along center_axis, so no
        world height changes.

        Args:
            observer_xz: Observer world (x, z) position
            chunk_size: Chunk edge length
            scale: World units to noise units

        Returns:
            Signed distance the origin moved along the visible axis
        """
        visible_2d = self.visible_axis.dir_2d()
        snapped = _snap_down(_dot2(observer_xz, visible_2d), chunk_size)
        d_along = snapped - _dot2(self.quadrant_origin, visible_2d)
        if d_along == 0.0:
            return 0.0

        self.noise_origin = self.noise_origin + (d_along * scale) * self.center_axis
        self.quadrant_origin = (
            self.quadrant_origin[0] + visible_2d[0] * d_along,
            self.quadrant_origin[1] + visible_2d[1] * d_along,
        )
        return d_along

    def _rotated_origin(self, new_visible: VisibleAxis, observer_xz: Tuple[float, float],
                        chunk_size: float) -> Tuple[float, float]:
        # Snap along the new axis, keep the cross-axis coordinate
        new_visible_2d = new_visible.dir_2d()
        cross_2d = new_visible.left().dir_2d()
        snapped = _snap_down(_dot2(observer_xz, new_visible_2d), chunk_size)
        cross = _dot2(self.quadrant_origin, cross_2d)
        return (
            new_visible_2d[0] * snapped + cross_2d[0] * cross,
            new_visible_2d[1] * snapped + cross_2d[1] * cross,
        )

    def rotate_left(self, observer_xz: Tuple[float, float], chunk_size: float,
                    scale: float, rng: np.random.Generator) -> "QuadrantSampler":
        """
        Turn the visible axis 90 degrees left

        The old left quadrant survives as the new right quadrant; the new
        left quadrant samples a fresh random plane.

        Args:
            observer_xz: Observer world (x, z) position
            chunk_size: Chunk edge length
            scale: World units to noise units
            rng: Random generator for the fresh axis

        Returns:
            The rotated sampler
        """
        new_visible = self.visible_axis.left()
        new_origin = self._rotated_origin(new_visible, observer_xz, chunk_size)

        new_center = self.left_axis
        new_right = self.center_axis
        new_left = random_orthogonal_axis(new_center, rng)

        d = (new_origin[0] - self.quadrant_origin[0], new_origin[1] - self.quadrant_origin[1])
        d_along = _dot2(d, new_visible.dir_2d())
        d_across = -_dot2(d, new_visible.left().dir_2d())
        new_noise_origin = (self.noise_origin
                            + (d_along * scale) * new_center
                            + (d_across * scale) * new_right)

        return QuadrantSampler(new_visible, new_left, new_center, new_right,
                               new_noise_origin, new_origin)

    def rotate_right(self, observer_xz: Tuple[float, float], chunk_size: float,
                     scale: float, rng: np.random.Generator) -> "QuadrantSampler":
        """
        Turn the visible axis 90 degrees right

        The old right quadrant survives as the new left quadrant; the new
        right quadrant samples a fresh random plane.

        Args:
            observer_xz: Observer world (x, z) position
            chunk_size: Chunk edge length
            scale: World units to noise units
            rng: Random generator for the fresh axis

        Returns:
            The rotated sampler
        """
        new_visible = self.visible_axis.right()
        new_origin = self._rotated_origin(new_visible, observer_xz, chunk_size)

        new_left = self.center_axis
        new_center = self.right_axis
        new_right = random_orthogonal_axis(new_center, rng)

        d = (new_origin[0] - self.quadrant_origin[0], new_origin[1] - self.quadrant_origin[1])
        d_along = _dot2(d, new_visible.dir_2d())
        d_across = _dot2(d, new_visible.left().dir_2d())
        new_noise_origin = (self.noise_origin
                            + (d_across * scale) * new_left
                            + (d_along * scale) * new_center)

        return QuadrantSampler(new_visible, new_left, new_center, new_right,
                               new_noise_origin, new_origin)

    def __repr__(self) -> str:
        return (f"QuadrantSampler(visible_axis={self.visible_axis.name}, "
                f"quadrant_origin={self.quadrant_origin}, "
                f"noise_origin={self.noise_origin.tolist()})")


@dataclass(frozen=True, eq=False)
class StaleRegion:
    """
    A chunk whose mesh was generated with a now-retired sampler

    Neighbouring chunks blend toward the old heights near it and copy its
    recorded edge heights verbatim on the shared boundary.
    """
    sampler: QuadrantSampler
    grid_pos: Tuple[int, int]
    edge_heights: "ChunkEdgeHeights"


def smoothstep(edge0: float, edge1: float, x: float) -> float:
    t = min(1.0, max(0.0, (x - edge0) / (edge1 - edge0)))
    return t * t * (3.0 - 2.0 * t)


def blend_factor(wx: float, wz: float, stale: StaleRegion, chunk_size: float) -> float:
    """
    Weight of the live height against the stale height at a world point

    Args:
        wx: World x-coordinate
        wz: World z-coordinate
        stale: The active stale region
        chunk_size: Chunk edge length

    Returns:
        0.0 on the stale chunk's footprint, rising smoothly to 1.0 at one
        chunk_size away from it
    """
    min_x = stale.grid_pos[0] * chunk_size
    max_x = min_x + chunk_size
    min_z = stale.grid_pos[1] * chunk_size
    max_z = min_z + chunk_size

    dx = max(0.0, min_x - wx, wx - max_x)
    dz = max(0.0, min_z - wz, wz - max_z)
    return smoothstep(0.0, chunk_size, math.sqrt(dx * dx + dz * dz))
