import math

import numpy as np

from beatvis.constants import (
    DEFAULT_PARTICLE_BURST_COUNT,
    DEFAULT_PARTICLE_MAX_LIFE,
    MAX_STRENGTH,
    PARTICLE_MARGIN,
    WAVE_BURST_FACTOR,
    WAVE_STEPS,
)
from beatvis.particle import Particle, particle_color


class ParticleSystem:
    """
    Owns the live particles.
    Two spawn strategies (center burst, wave flow) share one update/draw step.
    """

    def __init__(self, burst_count=DEFAULT_PARTICLE_BURST_COUNT, max_life=DEFAULT_PARTICLE_MAX_LIFE, rng=None):
        self.burst_count = burst_count
        self.max_life = max_life
        self.rng = rng if rng is not None else np.random.default_rng()
        self.particles = []

    @classmethod
    def from_config(cls, config, rng=None):
        return cls(
            burst_count=config.particle_burst_count,
            max_life=config.particle_max_life,
            rng=rng,
        )

    def __len__(self):
        return len(self.particles)

    def clear(self):
        self.particles = []

    def spawn_center(self, cx, cy, strength):
        """Radial burst from (cx, cy). Returns the number of particles spawned."""
        count = math.floor(self.burst_count * min(strength, MAX_STRENGTH))

        for _ in range(count):
            angle = self.rng.random() * math.pi * 2
            speed = 1 + self.rng.random() * 4 * strength

            self.particles.append(
                Particle(
                    x=cx,
                    y=cy,
                    vx=math.cos(angle) * speed,
                    vy=math.sin(angle) * speed,
                    size=2 + self.rng.random() * 3,
                    life=self.max_life,
                    max_life=self.max_life,
                )
            )
        return count

    def spawn_wave(self, waveform, strength, width, height):
        """
        Spawn particles along the current waveform shape.
        `waveform` holds byte samples centred at 128. Returns the number of particles spawned.
        """
        if waveform is None or len(waveform) == 0:
            return 0

        n = len(waveform)
        base_count = math.floor(self.burst_count * WAVE_BURST_FACTOR)
        count = math.floor(base_count * min(strength, MAX_STRENGTH))
        # Rounds up to one per point, so small bursts over-spawn
        local_count = max(1, count // WAVE_STEPS)

        mid_y = height * 0.5
        amplitude = height * 0.25
        base_speed = 1.0 + 2.5 * strength

        spawned = 0
        for i in range(WAVE_STEPS):
            t = i / (WAVE_STEPS - 1)
            idx = min(n - 1, math.floor(t * n))
            v = waveform[idx] / 255
            x = t * width
            y = mid_y + (v - 0.5) * 2 * amplitude

            for _ in range(local_count):
                direction = -1 if self.rng.random() < 0.5 else 1
                vx = direction * (base_speed + self.rng.random() * base_speed)
                vy = (self.rng.random() - 0.5) * base_speed

                self.particles.append(
                    Particle(
                        x=x,
                        y=y,
                        vx=vx,
                        vy=vy,
                        size=1.5 + self.rng.random() * 2.5,
                        life=self.max_life * (0.5 + self.rng.random() * 0.5),
                        max_life=self.max_life,
                    )
                )
                spawned += 1
        return spawned

    def update_and_draw(self, canvas, dt_ms):
        """Advance every particle by one frame, cull the dead ones and draw the rest."""
        width, height = canvas.width, canvas.height
        alive = []

        for particle in self.particles:
            life_ratio = particle.life_ratio
            particle.update(dt_ms)

            if not particle.is_alive() or particle.is_outside(width, height, PARTICLE_MARGIN):
                continue
            alive.append(particle)

            canvas.fill_circle(
                (particle.x, particle.y),
                particle.size,
                particle_color(life_ratio),
                max(life_ratio, 0),
            )

        self.particles = alive
