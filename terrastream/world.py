"""
Chunk streaming around a moving observer
"""
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

from terrastream.constants import (
    INITIAL_NEXT_COLOUR, INITIAL_QUADRANT_COLOURS, DebugColour, Quadrant,
    TerrainSettings, sector_for_forward
)
from terrastream.chunk import TerrainChunk, generate_chunk_mesh, terrain_height
from terrastream.entities import Entity, Observer
from terrastream.noise_field import NoiseField
from terrastream.objects import ObjectScatterer
from terrastream.sampler import QuadrantSampler, StaleRegion

logger = logging.getLogger(__name__)


class TerrainService:
    """Owns the sampler, the live chunks and the stale snapshot, and updates them once per tick"""

    def __init__(self, settings: Optional[TerrainSettings] = None,
                 scatterer: Optional[ObjectScatterer] = None):
        """
        Initialize the terrain service

        Args:
            settings: Terrain settings, defaults when omitted
            scatterer: Object scatterer, built from the settings when omitted

        Raises:
            TerrainConfigError: If the settings are unusable
        """
        self.settings = settings or TerrainSettings()
        self.settings.validate()

        self.noise = NoiseField(
            seed=self.settings.noise_seed,
            frequency=self.settings.noise_frequency,
            octaves=self.settings.noise_octaves
        )
        self.sampler = QuadrantSampler()
        self.rng = np.random.default_rng(self.settings.rotation_seed)
        self.scatterer = scatterer or ObjectScatterer.from_settings(self.settings)

        # Live chunks and their coordinates
        self.chunks: Dict[Tuple[int, int], TerrainChunk] = {}
        self.spawned: Set[Tuple[int, int]] = set()
        self.stale: Optional[StaleRegion] = None

        self.rotation_count = 0
        self.quadrant_colours: List[DebugColour] = list(INITIAL_QUADRANT_COLOURS)
        self.next_colour = INITIAL_NEXT_COLOUR

        self.followers: List[Entity] = []
        self.spawned_last_tick = 0

    # ------------------------------------------------------------ helpers
    def grid_cell(self, x: float, z: float) -> Tuple[int, int]:
        """
        Get the chunk coordinates containing a world position

        Args:
            x: World x-coordinate
            z: World z-coordinate

        Returns:
            Tuple of (grid_x, grid_z)
        """
        size = self.settings.chunk_size
        return (int(np.floor(x / size)), int(np.floor(z / size)))

    def cell_center(self, cell: Tuple[int, int]) -> Tuple[float, float]:
        size = self.settings.chunk_size
        return ((cell[0] + 0.5) * size, (cell[1] + 0.5) * size)

    def terrain_height(self, x: float, z: float) -> float:
        """
        Height of the visible terrain surface at a world position

        Args:
            x: World x-coordinate
            z: World z-coordinate

        Returns:
            Terrain height, blended toward the stale chunk when one is active
        """
        s = self.settings
        return terrain_height(x, z, self.noise, self.sampler, s.amplitude,
                              s.noise_scale, s.chunk_size, self.stale)

    def take_rotation_count(self) -> int:
        """Return the number of rotations since the last call and reset it"""
        count = self.rotation_count
        self.rotation_count = 0
        return count

    def add_follower(self, entity: Entity) -> None:
        """Keep an entity standing on the terrain every tick"""
        self.followers.append(entity)

    def get_chunk(self, cx: int, cz: int) -> Optional[TerrainChunk]:
        return self.chunks.get((cx, cz))

    def get_active_chunks(self) -> List[TerrainChunk]:
        """Get a list of all chunks that need to be rendered"""
        return list(self.chunks.values())

    def colour_for(self, quadrant: Quadrant) -> DebugColour:
        return self.quadrant_colours[quadrant.index()]

    def _despawn(self, cell: Tuple[int, int]) -> None:
        if self.stale is not None and self.stale.grid_pos == cell:
            logger.debug("Releasing stale region at %s", cell)
            self.stale = None
        self.chunks.pop(cell, None)
        self.spawned.discard(cell)

    # ------------------------------------------------------------ phases
    def update(self, observer: Optional[Observer]) -> None:
        """
        Advance the terrain by one tick

        Args:
            observer: The observer, or None to skip the tick
        """
        if observer is None:
            return

        self.detect_rotation(observer)
        self.update_origin(observer)
        self.manage_chunks(observer)
        self.follow_terrain_height(observer)

    def detect_rotation(self, observer: Observer) -> bool:
        """
        Rotate the sampler when the observer's facing crosses a sector boundary

        Args:
            observer: The observer

        Returns:
            True if the sampler rotated
        """
        sector = sector_for_forward(*observer.forward)
        current = self.sampler.visible_axis
        if sector == current:
            return False

        s = self.settings
        observer_xz = observer.get_position()
        observer_cell = self.grid_cell(*observer_xz)

        # Record the old sampler if the observer's chunk is about to be retired
        rotating_right = sector == current.right()
        retiring = current.left_quadrant() if rotating_right else current.right_quadrant()
        observer_quadrant = self.sampler.quadrant_at(*self.cell_center(observer_cell))

        if observer_quadrant == retiring:
            # Keep the existing snapshot while it still tracks this chunk:
            # the mesh there was built from that older sampler
            if self.stale is None or self.stale.grid_pos != observer_cell:
                chunk = self.chunks.get(observer_cell)
                if chunk is not None:
                    self.stale = StaleRegion(self.sampler.copy(), observer_cell, chunk.edge_heights)
                    logger.debug("Captured stale region at %s", observer_cell)

        if rotating_right:
            new_sampler = self.sampler.rotate_right(observer_xz, s.chunk_size, s.noise_scale, self.rng)
            fresh = sector.right_quadrant()
        else:
            new_sampler = self.sampler.rotate_left(observer_xz, s.chunk_size, s.noise_scale, self.rng)
            fresh = sector.left_quadrant()

        # Drop everything behind the new origin along the new visible axis
        new_visible_2d = sector.dir_2d()
        origin_along = (new_sampler.quadrant_origin[0] * new_visible_2d[0]
                        + new_sampler.quadrant_origin[1] * new_visible_2d[1])
        behind = []
        for cell in self.chunks:
            if cell == observer_cell:
                continue
            cx, cz = self.cell_center(cell)
            if cx * new_visible_2d[0] + cz * new_visible_2d[1] < origin_along:
                behind.append(cell)
        for cell in behind:
            self._despawn(cell)

        self.sampler = new_sampler
        self.quadrant_colours[fresh.index()] = self.next_colour
        self.next_colour = self.next_colour.next()
        self.rotation_count += 1

        logger.info("Rotated terrain %s -> %s, dropped %d chunks (rotation %d)",
                    current.name, sector.name, len(behind), self.rotation_count)
        return True

    def update_origin(self, observer: Observer) -> None:
        """Keep the quadrant origin one chunk behind the observer along the visible axis"""
        s = self.settings
        moved = self.sampler.slide_origin(observer.get_position(), s.chunk_size, s.noise_scale)
        if moved:
            logger.debug("Slid quadrant origin by %.2f to %s", moved, self.sampler.quadrant_origin)

    def _candidate_cells(self, center: Tuple[int, int], visible_2d: Tuple[float, float],
                         observer_along: float) -> Iterable[Tuple[int, int]]:
        radius = self.settings.render_radius
        radius_sq = radius * radius
        cells = []
        for dz in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                dist_sq = dx * dx + dz * dz
                if dist_sq > radius_sq:
                    continue
                cell = (center[0] + dx, center[1] + dz)
                if cell in self.spawned:
                    continue
                cx, cz = self.cell_center(cell)
                if cx * visible_2d[0] + cz * visible_2d[1] < observer_along:
                    continue
                cells.append((dist_sq, dz, dx, cell))

        # Nearest cells first so the observer's surroundings fill in before the horizon
        cells.sort()
        return [cell for _, _, _, cell in cells]

    def manage_chunks(self, observer: Observer) -> int:
        """
        Spawn and despawn chunks based on distance and visibility

        Args:
            observer: The observer

        Returns:
            Number of chunks spawned this tick
        """
        s = self.settings
        observer_cell = self.grid_cell(*observer.get_position())
        visible_2d = self.sampler.visible_axis.dir_2d()
        ocx, ocz = self.cell_center(observer_cell)
        observer_along = ocx * visible_2d[0] + ocz * visible_2d[1]
        keep_sq = s.get_despawn_radius() ** 2

        # Despawn chunks that are too far or behind the observer
        dropped = []
        for cell in self.chunks:
            dx = cell[0] - observer_cell[0]
            dz = cell[1] - observer_cell[1]
            too_far = dx * dx + dz * dz > keep_sq
            cx, cz = self.cell_center(cell)
            behind = cx * visible_2d[0] + cz * visible_2d[1] < observer_along
            if too_far or behind:
                dropped.append(cell)
        for cell in dropped:
            self._despawn(cell)

        # Spawn missing chunks ahead, a bounded number per tick
        spawned = 0
        for cell in self._candidate_cells(observer_cell, visible_2d, observer_along):
            if spawned >= s.max_spawns_per_frame:
                break
            self.spawn_chunk(cell)
            spawned += 1

        self.spawned_last_tick = spawned
        if spawned or dropped:
            logger.debug("Spawned %d chunks, despawned %d, %d live",
                         spawned, len(dropped), len(self.chunks))
        return spawned

    def spawn_chunk(self, cell: Tuple[int, int]) -> TerrainChunk:
        """
        Generate a chunk with the live sampler and add it to the working set

        Args:
            cell: Chunk coordinates

        Returns:
            The new chunk
        """
        s = self.settings
        mesh, edge_heights = generate_chunk_mesh(cell[0], cell[1], s, self.noise,
                                                 self.sampler, self.stale)
        placements = self.scatterer.scatter(cell[0], cell[1], s, self.noise,
                                            self.sampler, self.stale)
        quadrant = self.sampler.quadrant_at(*self.cell_center(cell))
        chunk = TerrainChunk(cell[0], cell[1], mesh, edge_heights,
                             self.colour_for(quadrant), placements)
        self.chunks[cell] = chunk
        self.spawned.add(cell)
        return chunk

    def follow_terrain_height(self, observer: Observer) -> None:
        """Stand the observer and every follower on the terrain surface"""
        for entity in [observer] + self.followers:
            entity.y = self.terrain_height(entity.x, entity.z) + entity.height_offset
