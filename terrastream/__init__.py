"""
Streams an endless height-field terrain around a moving observer
"""
from terrastream.constants import (
    DebugColour, ObjectCategory, Quadrant, TerrainConfigError, TerrainSettings,
    VisibleAxis, sector_for_forward
)
from terrastream.noise_field import NoiseField
from terrastream.sampler import QuadrantSampler, StaleRegion, blend_factor
from terrastream.chunk import (
    ChunkEdgeHeights, ChunkMesh, TerrainChunk, generate_chunk_mesh, terrain_height
)
from terrastream.objects import ObjectScatterer, Placement
from terrastream.entities import Companion, Entity, Observer
from terrastream.world import TerrainService

__all__ = [
    "DebugColour",
    "ObjectCategory",
    "Quadrant",
    "TerrainConfigError",
    "TerrainSettings",
    "VisibleAxis",
    "sector_for_forward",
    "NoiseField",
    "QuadrantSampler",
    "StaleRegion",
    "blend_factor",
    "ChunkEdgeHeights",
    "ChunkMesh",
    "TerrainChunk",
    "generate_chunk_mesh",
    "terrain_height",
    "ObjectScatterer",
    "Placement",
    "Companion",
    "Entity",
    "Observer",
    "TerrainService",
]
