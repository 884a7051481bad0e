"""namefinder - discovers short, brandable, registrable domain names."""

__version__ = "1.0.0"
