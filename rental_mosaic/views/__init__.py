from .mosaic import mosaic_bp

__all__ = ['mosaic_bp']
