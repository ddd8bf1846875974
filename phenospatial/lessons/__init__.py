# -*- coding: utf-8 -*-
"""Workshop lessons: mapping plant phenology with vector and raster data.

Each lesson is a plain, top-to-bottom script wrapped in a ``run`` function so it can be executed from a notebook,
from ``main.py`` or from the tests. The lessons build on the same small dataset:

* phenometric observations (first day of year a phenophase such as "Breaking leaf buds" was seen on a plant),
* GNIS named features (summits, lakes) as points,
* state boundaries as polygons,
* a gridded Spring Index first-leaf raster predicting the same event.

Concepts covered
----------------
Vector data
    Features stored as points, lines or polygons, one geometry per row plus attribute columns.
Raster data
    A grid of cells, each cell holding one value for the area it covers. An affine transform ties rows and
    columns to map coordinates.
Coordinate reference systems
    Geographic CRSs (degrees of latitude/longitude on a datum such as WGS84 or NAD83) and projected CRSs
    (metres on a flat surface, e.g. UTM zones or CONUS Albers). Distances and buffers need metres; layers must
    share a CRS before they are overlaid.

Lessons
-------
``vector``  reading points and polygons, point-in-polygon, reprojection, buffers, intersections, distances.
``raster``  reading, summarizing, cropping and reprojecting rasters, extracting values at points.
``webmap``  an interactive map with basemap tiles, colored markers, a raster overlay, a legend and a title.
"""
