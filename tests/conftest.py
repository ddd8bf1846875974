# -*- coding: utf-8 -*-
"""Shared fixtures: a small hand-made raster, point and polygon layers, and the synthetic workshop dataset."""

import matplotlib

matplotlib.use("Agg")

import geopandas as gpd  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402
from rasterio.transform import from_origin  # noqa: E402
from shapely.geometry import Point, box  # noqa: E402

from phenospatial import Layer, create_sample_data  # noqa: E402
from phenospatial.lessons.data import load_workshop_data  # noqa: E402


@pytest.fixture(autouse=True)
def close_figures():
    """Close matplotlib figures left open by a test."""
    yield
    plt.close("all")


@pytest.fixture
def grid_layer():
    """10 x 10 raster over (-110, 34, -109, 35) holding 0..99 row by row; the top-left cell is nodata."""
    data = np.arange(100, dtype=np.float32).reshape(10, 10)
    data[0, 0] = -9999
    return Layer.from_raster(data, from_origin(-110.0, 35.0, 0.1, 0.1), "EPSG:4326", nodata=-9999, name="grid")


@pytest.fixture
def points_layer():
    """Three points: on the nodata cell, on cell (row 5, col 5), and far outside the grid."""
    gdf = gpd.GeoDataFrame(
        {"name": ["nodata", "inside", "outside"]},
        geometry=[Point(-109.95, 34.95), Point(-109.45, 34.45), Point(-100.0, 30.0)],
        crs="EPSG:4326",
    )
    return Layer.from_objects(gdf, name="points")


@pytest.fixture
def halves_layer():
    """Two polygons splitting the grid extent into a west and an east half."""
    gdf = gpd.GeoDataFrame(
        {"half": ["west", "east"]},
        geometry=[box(-110.0, 34.0, -109.5, 35.0), box(-109.5, 34.0, -109.0, 35.0)],
        crs="EPSG:4326",
    )
    return Layer.from_objects(gdf, name="halves")


@pytest.fixture
def sample_paths(tmp_path):
    """Synthetic workshop files in a temporary directory."""
    return create_sample_data(str(tmp_path / "data"))


@pytest.fixture
def workshop_data(sample_paths):
    """Workshop layers loaded from the synthetic files."""
    return load_workshop_data(sample_paths)
