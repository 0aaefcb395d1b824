# roadmapZ
__version__ = "0.1.0"
