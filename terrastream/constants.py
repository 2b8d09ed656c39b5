"""Terrain constants, direction enums and settings"""
from enum import Enum, auto
from typing import Tuple
import pygame

# Display settings
SCREEN_WIDTH = 1280
SCREEN_HEIGHT = 720
FULLSCREEN = False
FPS = 60
PIXELS_PER_UNIT = 3.0  # Map zoom for the top-down viewer

# Observer movement
WALK_SPEED = 12.0  # World units per second
TURN_SPEED = 1.8  # Radians per second
EYE_HEIGHT = 1.5
COMPANION_LEAD = 6.0  # Distance the companion walks ahead of the observer
COMPANION_HEIGHT = 0.9

# Colors
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
TERMINAL_GREEN = (0, 255, 128)
BACKGROUND_COLOR = (18, 20, 28)
SEAM_COLOR = (240, 240, 240)
STALE_OUTLINE_COLOR = (255, 60, 200)
OBSERVER_COLOR = (255, 255, 255)
COMPANION_COLOR = (255, 200, 40)


class VisibleAxis(Enum):
    """Cardinal world direction the observer is facing"""
    NORTH = auto()
    EAST = auto()
    SOUTH = auto()
    WEST = auto()

    def left(self) -> "VisibleAxis":
        """Axis 90 degrees counter-clockwise from this one"""
        return _AXIS_LEFT[self]

    def right(self) -> "VisibleAxis":
        """Axis 90 degrees clockwise from this one"""
        return _AXIS_RIGHT[self]

    def dir_2d(self) -> Tuple[float, float]:
        """Unit direction in the XZ plane as (x, z)"""
        return _AXIS_DIR[self]

    def left_quadrant(self) -> "Quadrant":
        return _AXIS_QUADRANTS[self][0]

    def right_quadrant(self) -> "Quadrant":
        return _AXIS_QUADRANTS[self][1]


class Quadrant(Enum):
    """World regions around the sampler origin, in index order"""
    NORTH_WEST = 0
    NORTH_EAST = 1
    SOUTH_EAST = 2
    SOUTH_WEST = 3

    def index(self) -> int:
        return self.value


# +x is east, +z is north
_AXIS_DIR = {
    VisibleAxis.NORTH: (0.0, 1.0),
    VisibleAxis.EAST: (1.0, 0.0),
    VisibleAxis.SOUTH: (0.0, -1.0),
    VisibleAxis.WEST: (-1.0, 0.0),
}

_AXIS_LEFT = {
    VisibleAxis.NORTH: VisibleAxis.WEST,
    VisibleAxis.EAST: VisibleAxis.NORTH,
    VisibleAxis.SOUTH: VisibleAxis.EAST,
    VisibleAxis.WEST: VisibleAxis.SOUTH,
}

_AXIS_RIGHT = {left: axis for axis, left in _AXIS_LEFT.items()}

# (left quadrant, right quadrant) ahead of each visible axis
_AXIS_QUADRANTS = {
    VisibleAxis.NORTH: (Quadrant.NORTH_WEST, Quadrant.NORTH_EAST),
    VisibleAxis.EAST: (Quadrant.NORTH_EAST, Quadrant.SOUTH_EAST),
    VisibleAxis.SOUTH: (Quadrant.SOUTH_EAST, Quadrant.SOUTH_WEST),
    VisibleAxis.WEST: (Quadrant.SOUTH_WEST, Quadrant.NORTH_WEST),
}


def sector_for_forward(forward_x: float, forward_z: float) -> VisibleAxis:
    """
    Classify a horizontal forward vector into one of the four cardinal sectors

    Ties on a perfect diagonal go to the north/south axis.

    Args:
        forward_x: X component of the forward vector
        forward_z: Z component of the forward vector

    Returns:
        The visible axis whose 45 degree sector contains the vector
    """
    if abs(forward_z) >= abs(forward_x):
        return VisibleAxis.NORTH if forward_z > 0.0 else VisibleAxis.SOUTH
    return VisibleAxis.EAST if forward_x > 0.0 else VisibleAxis.WEST


# Quadrant colour tags, handed out one per rotation
class DebugColour(Enum):
    RED = 0
    GREEN = 1
    BLUE = 2
    YELLOW = 3
    CYAN = 4
    MAGENTA = 5
    ORANGE = 6
    WHITE = 7

    def next(self) -> "DebugColour":
        members = list(DebugColour)
        return members[(self.value + 1) % len(members)]


DEBUG_COLOUR_RGB = {
    DebugColour.RED: (255, 0, 0),
    DebugColour.GREEN: (0, 255, 0),
    DebugColour.BLUE: (0, 0, 255),
    DebugColour.YELLOW: (255, 255, 0),
    DebugColour.CYAN: (0, 255, 255),
    DebugColour.MAGENTA: (255, 0, 255),
    DebugColour.ORANGE: (255, 128, 0),
    DebugColour.WHITE: (255, 255, 255),
}
TERRAIN_COLOR = (25, 153, 25)  # Used for every tag when debug colours are off

INITIAL_QUADRANT_COLOURS = (
    DebugColour.RED,    # NW (initial left)
    DebugColour.GREEN,  # NE (initial right)
    DebugColour.RED,    # SE
    DebugColour.RED,    # SW
)
INITIAL_NEXT_COLOUR = DebugColour.BLUE


# Scattered object categories
class ObjectCategory(Enum):
    DEAD_TREE = auto()
    ROCK = auto()
    TREE = auto()
    GROUND_COVER = auto()


OBJECT_COLORS = {
    ObjectCategory.DEAD_TREE: (110, 90, 70),
    ObjectCategory.ROCK: (150, 150, 150),
    ObjectCategory.TREE: (20, 90, 30),
    ObjectCategory.GROUND_COVER: (140, 200, 90),
}

# Terrain defaults
CHUNK_SIZE = 8.0  # World units per chunk edge
CHUNK_RESOLUTION = 5  # Vertices per chunk edge
TERRAIN_AMPLITUDE = 8.0
NOISE_SCALE = 0.01  # World units to noise units
RENDER_RADIUS = 16  # In chunks
NOISE_SEED = 42
NOISE_FREQUENCY = 2.0
NOISE_OCTAVES = 4
MAX_SPAWNS_PER_FRAME = 64  # Caps mesh generation per tick to avoid hitches
BLUE_NOISE_RADIUS = 0.15  # Minimum spacing in the unit square
BLUE_NOISE_SEED = 42


class TerrainConfigError(ValueError):
    """Raised at startup when the terrain settings are unusable"""


# Terrain generation settings
class TerrainSettings:
    def __init__(self):
        self.chunk_size = CHUNK_SIZE
        self.chunk_resolution = CHUNK_RESOLUTION
        self.amplitude = TERRAIN_AMPLITUDE
        self.noise_scale = NOISE_SCALE
        self.render_radius = RENDER_RADIUS
        self.noise_seed = NOISE_SEED
        self.noise_frequency = NOISE_FREQUENCY
        self.noise_octaves = NOISE_OCTAVES
        self.max_spawns_per_frame = MAX_SPAWNS_PER_FRAME
        self.eye_height = EYE_HEIGHT
        self.rotation_seed = 0  # Seeds the generator used for fresh noise axes
        self.blue_noise_radius = BLUE_NOISE_RADIUS
        self.blue_noise_seed = BLUE_NOISE_SEED
        self.debug_colours = False

    def validate(self) -> None:
        """
        Check the settings for values the terrain cannot work with

        Raises:
            TerrainConfigError: If any setting is out of range
        """
        if self.chunk_size <= 0:
            raise TerrainConfigError("chunk_size must be positive")
        if self.noise_scale <= 0:
            raise TerrainConfigError("noise_scale must be positive")
        if self.chunk_resolution < 2:
            raise TerrainConfigError("chunk_resolution must be at least 2")
        if self.render_radius < 0:
            raise TerrainConfigError("render_radius must not be negative")
        if self.max_spawns_per_frame < 1:
            raise TerrainConfigError("max_spawns_per_frame must be at least 1")
        if self.noise_octaves < 1:
            raise TerrainConfigError("noise_octaves must be at least 1")
        # The seed offsets a 256 entry permutation table
        if not 0 <= self.noise_seed < 256:
            raise TerrainConfigError("noise_seed must be in the range 0 to 255")
        if self.blue_noise_radius <= 0:
            raise TerrainConfigError("blue_noise_radius must be positive")

    def get_vertex_spacing(self) -> float:
        """Distance between neighbouring mesh vertices"""
        return self.chunk_size / (self.chunk_resolution - 1)

    def get_despawn_radius(self) -> int:
        """Chunks beyond this many cells from the observer are dropped"""
        return self.render_radius + 2


# Controls
KEY_FORWARD = pygame.K_w
KEY_BACK = pygame.K_s
KEY_TURN_LEFT = pygame.K_a
KEY_TURN_RIGHT = pygame.K_d
KEY_DEBUG = pygame.K_F3
KEY_QUIT = pygame.K_ESCAPE
