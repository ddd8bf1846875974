# -*- coding: utf-8 -*-
# phenospatial/__init__.py

"""
PhenoSpatial: workshop toolkit for mapping plant phenology with vector and raster data
=====================================================================================

PhenoSpatial wraps the geospatial Python stack (geopandas, rasterio, pyproj, matplotlib, folium) into small,
readable steps used by the workshop lessons.

Key features:
- Reading shapefiles, GeoJSON, CSV point tables, GNIS files and GeoTIFFs
- Reprojecting vector and raster layers
- Buffers, point-in-polygon joins, intersections and great-circle distances
- Cropping rasters and extracting raster values at points
- Static maps and an interactive folium web map with legend and title
"""

__version__ = "0.1.0"

from .core.layer import Layer, LayerManager
from .core.geometry import buffer_points, distance_to_nearest, great_circle_distance, intersect_layers, points_in_polygons
from .core.palette import bin_values, continuous_colors, factor_palette, map_colors
from .core.phenology import (
    classify_anomaly,
    compare_to_raster,
    filter_phenometrics,
    read_phenometrics,
    sites_to_layer,
    summarize_sites,
    tidy_phenometrics,
)
from .core.projection import bounds_latlon, check_same_crs, crs_equal, estimate_utm_crs, reproject_raster, reproject_vector
from .core.raster_ops import crop_raster, extract_values, query_pixel

from .io.raster import layer_to_raster, read_raster, read_raster_layer, write_raster
from .io.vector import layer_to_vector, read_gnis, read_points_csv, read_vector, read_vector_layer, write_vector

from .stats.summary import attach_basic_stats, attach_class_distribution, raster_summary

from .utils.helpers import create_sample_data
from .viz.charts import plot_histogram, plot_scatter
from .viz.maps import plot_categories, plot_comparison, plot_layer, plot_raster_interactive
from .viz.webmap import build_web_map, save_web_map
