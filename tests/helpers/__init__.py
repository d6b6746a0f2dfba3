"""Test helper modules for the Card Creatr test suite.

- fonts: a small TrueType font built with fontTools
- images: raster image bytes built with Pillow
- projects: on-disk config/template/data projects and bundles
"""
