# -*- coding: utf-8 -*-
import numpy as np
import pytest
from rasterio.crs import CRS as RasterioCRS

from phenospatial import (
    LayerManager,
    bounds_latlon,
    check_same_crs,
    crs_equal,
    estimate_utm_crs,
    query_pixel,
    reproject_raster,
    reproject_vector,
)
from phenospatial.core.projection import crs_name


def test_crs_equal_across_spellings():
    assert crs_equal("EPSG:4326", RasterioCRS.from_epsg(4326))
    assert crs_equal(4326, "epsg:4326")
    assert not crs_equal("EPSG:4326", "EPSG:4269")
    assert crs_name(RasterioCRS.from_epsg(5070)) == "EPSG:5070"


def test_vector_round_trip(points_layer):
    manager = LayerManager()
    projected = reproject_vector(points_layer, "EPSG:5070", layer_manager=manager)
    back = reproject_vector(projected, "EPSG:4326")

    assert projected.name == "points_EPSG5070"
    assert projected.metadata["dst_crs"] == "EPSG:5070"
    assert manager.lineage("points_EPSG5070") == ["points", "points_EPSG5070"]
    np.testing.assert_allclose(back.objects.geometry.x, points_layer.objects.geometry.x, atol=1e-6)
    np.testing.assert_allclose(back.objects.geometry.y, points_layer.objects.geometry.y, atol=1e-6)


def test_check_same_crs(points_layer, halves_layer):
    check_same_crs(points_layer, halves_layer)

    projected = reproject_vector(halves_layer, "EPSG:5070")
    with pytest.raises(ValueError) as excinfo:
        check_same_crs(points_layer, projected)
    assert "EPSG:4326" in str(excinfo.value)
    assert "EPSG:5070" in str(excinfo.value)


def test_reproject_raster_keeps_values_and_nodata(grid_layer):
    projected = reproject_raster(grid_layer, "EPSG:3857")

    assert crs_equal(projected.crs, "EPSG:3857")
    assert projected.nodata == -9999
    assert projected.raster.dtype == grid_layer.raster.dtype
    assert projected.metadata["resampling"] == "nearest"
    pixel = query_pixel(projected, -109.45, 34.45, crs="EPSG:4326")
    assert abs(pixel["value"] - 55) <= 11


def test_reproject_raster_rejects_unknown_resampling(grid_layer):
    with pytest.raises(ValueError, match="resampling"):
        reproject_raster(grid_layer, "EPSG:3857", resampling="sharpest")


def test_estimate_utm_crs(points_layer, grid_layer):
    assert estimate_utm_crs(points_layer).to_epsg() in (32612, 32613, 32614)
    assert estimate_utm_crs(grid_layer).to_epsg() == 32612


def test_bounds_latlon(grid_layer):
    (south, west), (north, east) = bounds_latlon(grid_layer)

    assert (south, west, north, east) == pytest.approx((34.0, -110.0, 35.0, -109.0))
