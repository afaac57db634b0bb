"""dirmirror -- one-way directory tree mirroring."""

__version__ = "0.3.0"
