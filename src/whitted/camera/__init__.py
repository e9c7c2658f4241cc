"""Camera model for prime ray generation."""

from src.whitted.camera.pinhole import PinholeCamera, get_prime_ray

__all__ = ["PinholeCamera", "get_prime_ray"]
