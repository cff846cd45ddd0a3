"""Coverage path generators satisfying ``generate_path(boundary, obstacles) -> path``."""

from .stripes import PathGenerator, generate_stripe_path, make_stripe_generator

__all__ = ["PathGenerator", "generate_stripe_path", "make_stripe_generator"]
