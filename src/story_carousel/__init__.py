"""Story Carousel - turn generated stories into Instagram carousel posts."""

__version__ = "0.1.0"
