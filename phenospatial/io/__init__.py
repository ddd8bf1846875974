# -*- coding: utf-8 -*-
"""The io package contains modules for reading and writing both raster and vector data.

It abstracts file operations and coordinate system handling for shapefiles, CSV point tables, GNIS files and GeoTIFFs.
"""
