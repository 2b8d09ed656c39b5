"""
Seeded continuous 3D noise field
"""
from typing import Sequence

import noise


class NoiseField:
    """Fractal Perlin noise queried at arbitrary real-valued 3D points"""

    def __init__(self, seed: int = 42, frequency: float = 2.0, octaves: int = 4,
                 persistence: float = 0.5, lacunarity: float = 2.0):
        """
        Initialize the noise field

        Args:
            seed: Noise seed, used as the permutation table offset
            frequency: Multiplier applied to every input coordinate
            octaves: Number of fractal octaves
            persistence: Amplitude falloff per octave
            lacunarity: Frequency growth per octave
        """
        self._seed = int(seed)
        self._frequency = float(frequency)
        self._octaves = int(octaves)
        self._persistence = float(persistence)
        self._lacunarity = float(lacunarity)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def frequency(self) -> float:
        return self._frequency

    def sample(self, point: Sequence[float]) -> float:
        """
        Sample the field

        Args:
            point: Noise-space coordinate (x, y, z)

        Returns:
            Noise value, roughly in the range -1 to 1
        """
        return noise.pnoise3(
            float(point[0]) * self._frequency,
            float(point[1]) * self._frequency,
            float(point[2]) * self._frequency,
            octaves=self._octaves,
            persistence=self._persistence,
            lacunarity=self._lacunarity,
            repeatx=1024,
            repeaty=1024,
            repeatz=1024,
            base=self._seed
        )
