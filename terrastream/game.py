"""
Interactive viewer: walk an observer over the streamed terrain
"""
import logging

import pygame

from terrastream.constants import (
    FPS, KEY_FORWARD, KEY_BACK, KEY_TURN_LEFT, KEY_TURN_RIGHT, KEY_DEBUG, KEY_QUIT,
    TerrainSettings
)
from terrastream.entities import Companion, Observer
from terrastream.render import Renderer
from terrastream.world import TerrainService

logger = logging.getLogger(__name__)


class Game:
    """Main viewer class"""

    def __init__(self, settings: TerrainSettings = None):
        """
        Initialize the viewer

        Args:
            settings: Terrain settings, defaults when omitted
        """
        self.running = False
        self.renderer = Renderer()
        self.clock = pygame.time.Clock()

        self.terrain = TerrainService(settings)
        self.observer = Observer(0.0, 0.0, eye_height=self.terrain.settings.eye_height)
        self.companion = Companion(self.observer)
        self.terrain.add_follower(self.companion)

        self.renderer.debug_colours = self.terrain.settings.debug_colours
        self.paused = False

    def process_input(self) -> None:
        """Process user input"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == KEY_QUIT:
                    self.running = False
                elif event.key == KEY_DEBUG:
                    self.renderer.debug_colours = not self.renderer.debug_colours
                    self.renderer.show_debug = self.renderer.debug_colours
                elif event.key == pygame.K_p:
                    self.paused = not self.paused

        keys = pygame.key.get_pressed()
        self.observer.move_forward = keys[KEY_FORWARD] or keys[pygame.K_UP]
        self.observer.move_back = keys[KEY_BACK] or keys[pygame.K_DOWN]
        self.observer.turn_left = keys[KEY_TURN_LEFT] or keys[pygame.K_LEFT]
        self.observer.turn_right = keys[KEY_TURN_RIGHT] or keys[pygame.K_RIGHT]

    def update(self, dt: float) -> None:
        """
        Move the entities and advance the terrain

        Args:
            dt: Seconds since the last frame
        """
        if self.paused:
            return

        self.observer.update(dt)
        self.companion.update(dt)
        self.terrain.update(self.observer)

        rotations = self.terrain.take_rotation_count()
        if rotations:
            pygame.display.set_caption(f"Terrastream - facing {self.terrain.sampler.visible_axis.name}")

    def render(self) -> None:
        self.renderer.render(self.terrain, self.observer, [self.companion])
        pygame.display.flip()

    def run(self) -> None:
        """Run the main loop until the window closes"""
        self.running = True
        logger.info("Starting viewer with render radius %d", self.terrain.settings.render_radius)
        while self.running:
            dt = self.clock.tick(FPS) / 1000.0
            self.process_input()
            self.update(dt)
            self.render()
        pygame.quit()
