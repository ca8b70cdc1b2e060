from beatvis.constants import (
    NOMINAL_FRAME_MS,
    PARTICLE_DRAG,
    PARTICLE_GRAVITY,
    PARTICLE_MARGIN,
)


class Particle:
    """A single particle spawned on a beat."""

    __slots__ = ("x", "y", "vx", "vy", "size", "life", "max_life")

    def __init__(self, x, y, vx, vy, size, life, max_life):
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.size = size
        self.life = life
        self.max_life = max_life

    @property
    def life_ratio(self):
        return self.life / self.max_life

    def update(self, dt_ms):
        """
        Advance one frame. Velocity is a per-frame displacement;
        only the downward pull is scaled by the frame time.
        """
        self.x += self.vx
        self.y += self.vy

        # Light drag
        self.vx *= PARTICLE_DRAG
        self.vy *= PARTICLE_DRAG

        # Gentle downward pull
        self.vy += PARTICLE_GRAVITY * (dt_ms / NOMINAL_FRAME_MS)

        self.life -= dt_ms

    def is_alive(self):
        return self.life > 0

    def is_outside(self, width, height, margin=PARTICLE_MARGIN):
        return (
            self.x < -margin
            or self.x > width + margin
            or self.y < -margin
            or self.y > height + margin
        )

    def __repr__(self):
        return f"Particle(x={self.x:.1f}, y={self.y:.1f}, life={self.life:.0f}/{self.max_life})"


def particle_color(life_ratio):
    """Bluish when fresh, pinkish as the particle dies. Returned in BGR."""
    r = int(200 + (1 - life_ratio) * 55)
    g = int(90 + life_ratio * 40)
    b = int(210 + life_ratio * 45)
    return (b, g, r)
