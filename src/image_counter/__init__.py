"""
Image counter that recursively follows links from a root folder or URL.
Counts every image reachable within a maximum depth, visiting each resource once.
"""
from image_counter.config import CountConfig
from image_counter.core import count_images, CountStats, ImageCounter, ResourceVisit

__version__ = "1.0.0"
__all__ = ["count_images", "CountConfig", "CountStats", "ImageCounter", "ResourceVisit"]
