"""Laser line-scanner geometry, file formats and scan-path refinement steps."""

__version__ = "0.1.0"