"""blastradius - find what changed in everything a module depends on."""

__version__ = "0.1.0"
