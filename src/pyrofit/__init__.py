"""pyrofit — evolutionary fitting of pyrolysis decomposition kinetics."""

__version__ = "0.1.0"
