# -*- coding: utf-8 -*-
"""The core package encompasses the data containers and spatial operations used throughout the lessons.

It holds layers, coordinate reference system handling, geometry operations, raster operations, phenology helpers
and the category-to-color palettes shared by the static and interactive maps.
"""
