"""
Entities that move over the terrain
"""
from typing import Tuple
import math

from terrastream.constants import (
    WALK_SPEED, TURN_SPEED, EYE_HEIGHT, COMPANION_LEAD, COMPANION_HEIGHT
)


class Entity:
    """Base class for anything that stands on the terrain"""

    def __init__(self, x: float, z: float, height_offset: float = 0.0):
        """
        Initialize an entity at the given position

        Args:
            x: Initial x-coordinate
            z: Initial z-coordinate
            height_offset: Distance kept above the terrain surface
        """
        self.x = float(x)
        self.y = 0.0
        self.z = float(z)
        self.height_offset = height_offset

    def get_position(self) -> Tuple[float, float]:
        """
        Get the entity's horizontal position

        Returns:
            Tuple of (x, z) coordinates
        """
        return (self.x, self.z)


class Observer(Entity):
    """The viewpoint the terrain streams around"""

    def __init__(self, x: float = 0.0, z: float = 0.0, yaw: float = 0.0,
                 eye_height: float = EYE_HEIGHT):
        """
        Initialize the observer

        Args:
            x: Initial x-coordinate
            z: Initial z-coordinate
            yaw: Heading in radians, 0 faces north (+z), positive turns east
            eye_height: Distance of the viewpoint above the terrain
        """
        super().__init__(x, z, eye_height)
        self.yaw = yaw
        self.move_forward = False
        self.move_back = False
        self.turn_left = False
        self.turn_right = False

    @property
    def forward(self) -> Tuple[float, float]:
        """Horizontal unit forward vector as (x, z)"""
        return (math.sin(self.yaw), math.cos(self.yaw))

    def face(self, forward_x: float, forward_z: float) -> None:
        """Point the observer along a horizontal direction"""
        self.yaw = math.atan2(forward_x, forward_z)

    def update(self, dt: float) -> None:
        """
        Apply the current movement flags

        Args:
            dt: Seconds since the last update
        """
        if self.turn_left:
            self.yaw -= TURN_SPEED * dt
        if self.turn_right:
            self.yaw += TURN_SPEED * dt

        step = 0.0
        if self.move_forward:
            step += WALK_SPEED * dt
        if self.move_back:
            step -= WALK_SPEED * dt
        fx, fz = self.forward
        self.x += fx * step
        self.z += fz * step


class Companion(Entity):
    """Walks ahead of the observer so terrain changes are visible around it"""

    def __init__(self, target: Observer, lead: float = COMPANION_LEAD):
        """
        Initialize the companion

        Args:
            target: Observer to walk ahead of
            lead: Distance to keep in front of the observer
        """
        fx, fz = target.forward
        super().__init__(target.x + fx * lead, target.z + fz * lead, COMPANION_HEIGHT)
        self.target = target
        self.lead = lead
        self.smoothing = 0.1

    def update(self, dt: float) -> None:
        """
        Ease toward the point ahead of the observer

        Args:
            dt: Seconds since the last update
        """
        fx, fz = self.target.forward
        goal_x = self.target.x + fx * self.lead
        goal_z = self.target.z + fz * self.lead
        blend = min(1.0, self.smoothing * dt * 60.0)
        self.x += (goal_x - self.x) * blend
        self.z += (goal_z - self.z) * blend
