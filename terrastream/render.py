"""
Top-down map renderer for the streamed terrain
"""
import math
from typing import Iterable, Optional, Tuple

import pygame

from terrastream.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, FULLSCREEN, PIXELS_PER_UNIT, BACKGROUND_COLOR,
    SEAM_COLOR, STALE_OUTLINE_COLOR, OBSERVER_COLOR, COMPANION_COLOR, TERMINAL_GREEN,
    DEBUG_COLOUR_RGB, TERRAIN_COLOR, OBJECT_COLORS
)
from terrastream.entities import Entity, Observer
from terrastream.world import TerrainService


class Camera:
    """Camera centred on a world (x, z) point; north is up on screen"""

    def __init__(self, width: int, height: int, scale: float = PIXELS_PER_UNIT):
        """
        Initialize camera

        Args:
            width: Screen width in pixels
            height: Screen height in pixels
            scale: Pixels per world unit
        """
        self.x = 0.0
        self.z = 0.0
        self.width = width
        self.height = height
        self.scale = scale

    def follow(self, target_x: float, target_z: float) -> None:
        self.x = target_x
        self.z = target_z

    def world_to_screen(self, world_x: float, world_z: float) -> Tuple[int, int]:
        """
        Convert world coordinates to screen coordinates

        Args:
            world_x: X-coordinate in world space
            world_z: Z-coordinate in world space

        Returns:
            Tuple of (screen_x, screen_y) coordinates
        """
        screen_x = int(round((world_x - self.x) * self.scale + self.width / 2))
        screen_y = int(round(-(world_z - self.z) * self.scale + self.height / 2))
        return screen_x, screen_y


def shade(color: Tuple[int, int, int], height: float, amplitude: float) -> Tuple[int, int, int]:
    """Brighten high ground and darken low ground"""
    t = 0.5 + 0.5 * max(-1.0, min(1.0, height / amplitude)) if amplitude else 0.5
    factor = 0.45 + 0.8 * t
    return tuple(max(0, min(255, int(c * factor))) for c in color)


class Renderer:
    """Draws the live chunks, the quadrant seams and the entities"""

    def __init__(self, surface: Optional[pygame.Surface] = None):
        """
        Initialize the renderer

        Args:
            surface: Surface to draw on; a window is opened when omitted
        """
        if surface is None:
            pygame.init()
            flags = pygame.FULLSCREEN if FULLSCREEN else 0
            surface = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), flags)
            pygame.display.set_caption("Terrastream")
        elif not pygame.font.get_init():
            pygame.font.init()
        self.font = pygame.font.SysFont("Arial", 16)
        self.screen = surface
        self.camera = Camera(surface.get_width(), surface.get_height())
        self.show_debug = False
        self.debug_colours = False

    def chunk_color(self, chunk, service: TerrainService) -> Tuple[int, int, int]:
        base = DEBUG_COLOUR_RGB[chunk.colour] if self.debug_colours else TERRAIN_COLOR
        return shade(base, chunk.mesh.mean_height(), service.settings.amplitude)

    def render(self, service: TerrainService, observer: Observer,
               followers: Iterable[Entity] = ()) -> None:
        """
        Draw one frame

        Args:
            service: Terrain service to draw
            observer: The observer, the camera follows it
            followers: Other entities to draw
        """
        self.camera.follow(observer.x, observer.z)
        self.screen.fill(BACKGROUND_COLOR)

        size = service.settings.chunk_size
        cell_px = max(1, int(math.ceil(size * self.camera.scale)))
        for chunk in service.get_active_chunks():
            # Top-left on screen is the chunk's north-west corner
            left, top = self.camera.world_to_screen(chunk.grid_x * size, (chunk.grid_z + 1) * size)
            pygame.draw.rect(self.screen, self.chunk_color(chunk, service), (left, top, cell_px, cell_px))
            for placement in chunk.placements:
                pos = self.camera.world_to_screen(placement.x, placement.z)
                pygame.draw.circle(self.screen, OBJECT_COLORS[placement.category], pos, 2)

        if service.stale is not None:
            gx, gz = service.stale.grid_pos
            left, top = self.camera.world_to_screen(gx * size, (gz + 1) * size)
            pygame.draw.rect(self.screen, STALE_OUTLINE_COLOR, (left, top, cell_px, cell_px), 2)

        self._draw_seams(service)

        for follower in followers:
            pygame.draw.circle(self.screen, COMPANION_COLOR, self.camera.world_to_screen(follower.x, follower.z), 5)
        self._draw_observer(observer)

        if self.show_debug and self.font is not None:
            self._draw_debug(service, observer)

    def _draw_seams(self, service: TerrainService) -> None:
        ox, oz = service.sampler.quadrant_origin
        sx, sy = self.camera.world_to_screen(ox, oz)
        pygame.draw.line(self.screen, SEAM_COLOR, (sx, 0), (sx, self.camera.height), 1)
        pygame.draw.line(self.screen, SEAM_COLOR, (0, sy), (self.camera.width, sy), 1)

    def _draw_observer(self, observer: Observer) -> None:
        fx, fz = observer.forward
        tip = self.camera.world_to_screen(observer.x + fx * 4.0, observer.z + fz * 4.0)
        left = self.camera.world_to_screen(observer.x - fz * 1.5, observer.z + fx * 1.5)
        right = self.camera.world_to_screen(observer.x + fz * 1.5, observer.z - fx * 1.5)
        pygame.draw.polygon(self.screen, OBSERVER_COLOR, (tip, left, right))

    def _draw_debug(self, service: TerrainService, observer: Observer) -> None:
        lines = [
            f"pos ({observer.x:.1f}, {observer.y:.1f}, {observer.z:.1f})",
            f"facing {service.sampler.visible_axis.name}",
            f"chunks {len(service.chunks)} (+{service.spawned_last_tick})",
            f"stale {service.stale.grid_pos if service.stale else '-'}",
        ]
        for i, line in enumerate(lines):
            self.screen.blit(self.font.render(line, True, TERMINAL_GREEN), (10, 10 + i * 18))
