"""Scaffolds Go backend and Nuxt frontend modules from field declarations."""

__version__ = "0.1.0"
