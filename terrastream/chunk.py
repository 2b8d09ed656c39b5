"""
Terrain chunk meshes built from the quadrant noise sampler
"""
import math
from typing import Optional, Tuple

import numpy as np

from terrastream.constants import DebugColour, TerrainSettings
from terrastream.noise_field import NoiseField
from terrastream.sampler import QuadrantSampler, StaleRegion, blend_factor


class ChunkEdgeHeights:
    """
    Actual vertex heights along each edge of a generated chunk mesh

    ``south`` and ``north`` are the zi=0 and zi=res-1 rows indexed by xi,
    ``west`` and ``east`` the xi=0 and xi=res-1 columns indexed by zi.
    """

    def __init__(self, north: np.ndarray, south: np.ndarray, west: np.ndarray, east: np.ndarray):
        self.north = north
        self.south = south
        self.west = west
        self.east = east

    @classmethod
    def from_heights(cls, heights: np.ndarray) -> "ChunkEdgeHeights":
        """
        Extract the boundary rows and columns of a height grid

        Args:
            heights: (res, res) array indexed [zi, xi]

        Returns:
            The four edge arrays, copied
        """
        return cls(
            north=heights[-1, :].copy(),
            south=heights[0, :].copy(),
            west=heights[:, 0].copy(),
            east=heights[:, -1].copy(),
        )

    def shared_height(self, chunk_x: int, chunk_z: int, xi: int, zi: int,
                      stale_x: int, stale_z: int, res: int) -> Optional[float]:
        """
        Height of a vertex that lies on the boundary of the recorded chunk

        Args:
            chunk_x: Grid x of the chunk being built
            chunk_z: Grid z of the chunk being built
            xi: Vertex column in the chunk being built
            zi: Vertex row in the chunk being built
            stale_x: Grid x of the chunk these edges belong to
            stale_z: Grid z of the chunk these edges belong to
            res: Vertices per chunk edge

        Returns:
            The recorded height, or None if the vertex is not on a shared boundary
        """
        dx = chunk_x - stale_x
        dz = chunk_z - stale_z
        last = res - 1

        # Directly east: our west edge is its east edge
        if (dx, dz) == (1, 0) and xi == 0:
            return float(self.east[zi])
        # Directly west: our east edge is its west edge
        if (dx, dz) == (-1, 0) and xi == last:
            return float(self.west[zi])
        # Directly north: our south edge is its north edge
        if (dx, dz) == (0, 1) and zi == 0:
            return float(self.north[xi])
        # Directly south: our north edge is its south edge
        if (dx, dz) == (0, -1) and zi == last:
            return float(self.south[xi])
        # Diagonals share a single corner
        if (dx, dz) == (1, 1) and xi == 0 and zi == 0:
            return float(self.north[last])
        if (dx, dz) == (-1, 1) and xi == last and zi == 0:
            return float(self.north[0])
        if (dx, dz) == (1, -1) and xi == 0 and zi == last:
            return float(self.south[last])
        if (dx, dz) == (-1, -1) and xi == last and zi == last:
            return float(self.south[0])
        return None


class ChunkMesh:
    """Triangle-list mesh data for one chunk"""

    def __init__(self, positions: np.ndarray, normals: np.ndarray, indices: np.ndarray):
        self.positions = positions  # (n, 3) float32
        self.normals = normals  # (n, 3) float32
        self.indices = indices  # (m,) uint32, three per triangle

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def mean_height(self) -> float:
        return float(self.positions[:, 1].mean())


class TerrainChunk:
    """A spawned chunk: its mesh, its edge heights and what was placed on it"""

    def __init__(self, grid_x: int, grid_z: int, mesh: ChunkMesh, edge_heights: ChunkEdgeHeights,
                 colour: DebugColour, placements=None):
        """
        Initialize a chunk

        Args:
            grid_x: Chunk x-coordinate
            grid_z: Chunk z-coordinate
            mesh: Generated mesh
            edge_heights: Boundary heights of the mesh
            colour: Colour tag of the quadrant the chunk was spawned in
            placements: Objects scattered on the chunk
        """
        self.grid_x = grid_x
        self.grid_z = grid_z
        self.mesh = mesh
        self.edge_heights = edge_heights
        self.colour = colour
        self.placements = list(placements or [])

    @property
    def grid_pos(self) -> Tuple[int, int]:
        return (self.grid_x, self.grid_z)

    def center(self, chunk_size: float) -> Tuple[float, float]:
        return ((self.grid_x + 0.5) * chunk_size, (self.grid_z + 0.5) * chunk_size)


def terrain_height(wx: float, wz: float, noise: NoiseField, sampler: QuadrantSampler,
                   amplitude: float, noise_scale: float, chunk_size: float,
                   stale: Optional[StaleRegion] = None) -> float:
    """
    Sample terrain height at a world-space position

    Near an active stale region the height is blended toward what the
    retired sampler produced there.

    Args:
        wx: World x-coordinate
        wz: World z-coordinate
        noise: Noise field
        sampler: Live sampler
        amplitude: Height multiplier
        noise_scale: World units to noise units
        chunk_size: Chunk edge length
        stale: Active stale region, if any

    Returns:
        Terrain height
    """
    h = noise.sample(sampler.noise_point(wx, wz, noise_scale)) * amplitude

    if stale is not None:
        t = blend_factor(wx, wz, stale, chunk_size)
        if t < 1.0:
            old_h = noise.sample(stale.sampler.noise_point(wx, wz, noise_scale)) * amplitude
            return old_h + t * (h - old_h)
    return h


def generate_chunk_mesh(grid_x: int, grid_z: int, settings: TerrainSettings, noise: NoiseField,
                        sampler: QuadrantSampler,
                        stale: Optional[StaleRegion] = None) -> Tuple[ChunkMesh, ChunkEdgeHeights]:
    """
    Generate the height-field mesh for one chunk

    Vertices on a boundary shared with the stale chunk take its recorded
    heights verbatim, everything else is sampled.

    Args:
        grid_x: Chunk x-coordinate
        grid_z: Chunk z-coordinate
        settings: Terrain settings
        noise: Noise field
        sampler: Live sampler
        stale: Active stale region, if any

    Returns:
        Tuple of (mesh, edge heights)
    """
    size = settings.chunk_size
    res = settings.chunk_resolution
    step = settings.get_vertex_spacing()
    eps = step * 0.5
    last = res - 1

    def height_at(wx: float, wz: float) -> float:
        return terrain_height(wx, wz, noise, sampler, settings.amplitude,
                              settings.noise_scale, size, stale)

    heights = np.zeros((res, res), dtype=np.float32)
    positions = np.zeros((res * res, 3), dtype=np.float32)
    normals = np.zeros((res * res, 3), dtype=np.float32)

    for zi in range(res):
        for xi in range(res):
            # Shared boundaries land on identical coordinates in both chunks
            wx = (grid_x + xi / last) * size
            wz = (grid_z + zi / last) * size

            height = None
            if stale is not None:
                height = stale.edge_heights.shared_height(
                    grid_x, grid_z, xi, zi, stale.grid_pos[0], stale.grid_pos[1], res
                )
            if height is None:
                height = height_at(wx, wz)

            i = zi * res + xi
            heights[zi, xi] = height
            positions[i] = (wx, height, wz)

            # Normal from the height gradient via central differences
            nx = height_at(wx - eps, wz) - height_at(wx + eps, wz)
            ny = 2.0 * eps
            nz = height_at(wx, wz - eps) - height_at(wx, wz + eps)
            length = math.sqrt(nx * nx + ny * ny + nz * nz)
            normals[i] = (nx / length, ny / length, nz / length)

    indices = []
    for zi in range(res - 1):
        for xi in range(res - 1):
            i = zi * res + xi
            indices.extend((i, i + res, i + 1, i + 1, i + res, i + res + 1))

    mesh = ChunkMesh(positions, normals, np.array(indices, dtype=np.uint32))
    return mesh, ChunkEdgeHeights.from_heights(heights)
