# -*- coding: utf-8 -*-
import numpy as np
import pytest

from phenospatial import Layer, LayerManager, crop_raster, extract_values, query_pixel, reproject_vector


def test_crop_snaps_to_whole_cells(grid_layer):
    cropped = crop_raster(grid_layer, bounds=(-109.75, 34.25, -109.45, 34.55))

    assert cropped.raster.shape == (1, 4, 4)
    left, bottom, right, top = cropped.bounds
    assert left == pytest.approx(-109.8)
    assert top == pytest.approx(34.6)
    assert right == pytest.approx(-109.4)
    assert bottom == pytest.approx(34.2)
    # cell (row 4, col 2) of the source is the top-left of the crop
    assert cropped.raster[0, 0, 0] == 42
    assert cropped.parent is grid_layer
    assert cropped.nodata == grid_layer.nodata


def test_crop_outside_grid_raises(grid_layer):
    with pytest.raises(ValueError, match="do not overlap"):
        crop_raster(grid_layer, bounds=(0.0, 0.0, 1.0, 1.0))


def test_crop_requires_bounds_or_geometry(grid_layer):
    with pytest.raises(ValueError):
        crop_raster(grid_layer)


def test_crop_masks_outside_geometry(grid_layer, halves_layer):
    manager = LayerManager()
    west = halves_layer.objects[halves_layer.objects["half"] == "west"]
    west_layer = Layer.from_objects(west, name="west")

    cropped = crop_raster(grid_layer, bounds=grid_layer.bounds, geometry=west_layer, layer_manager=manager)

    assert cropped.raster.shape == grid_layer.raster.shape
    np.testing.assert_array_equal(cropped.raster[0, :, :5], grid_layer.raster[0, :, :5])
    assert (cropped.raster[0, :, 5:] == -9999).all()
    assert cropped.metadata["masked"] is True
    assert "grid_cropped" in manager.get_layer_names()


def test_crop_reprojects_geometry(grid_layer, halves_layer):
    projected = reproject_vector(halves_layer, "EPSG:3857")
    cropped = crop_raster(grid_layer, geometry=projected)

    assert cropped.raster.shape == (1, 10, 10)
    assert cropped.crs == grid_layer.crs


def test_extract_values_inside_outside_and_nodata(grid_layer, points_layer):
    sampled = extract_values(grid_layer, points_layer, column="doy")
    values = dict(zip(sampled.objects["name"], sampled.objects["doy"]))

    assert np.isnan(values["nodata"])
    assert values["inside"] == 55
    assert np.isnan(values["outside"])
    assert "doy" not in points_layer.objects.columns


def test_extract_values_reprojects_points(grid_layer, points_layer):
    mercator = reproject_vector(points_layer, "EPSG:3857")
    sampled = extract_values(grid_layer, mercator)

    assert sampled.objects["value"].iloc[1] == 55
    assert sampled.crs == mercator.crs


def test_extract_values_rejects_missing_band(grid_layer, points_layer):
    with pytest.raises(ValueError, match="Band"):
        extract_values(grid_layer, points_layer, band=2)


def test_query_pixel(grid_layer):
    assert query_pixel(grid_layer, -109.45, 34.45) == {"row": 5, "col": 5, "value": 55.0}
    assert np.isnan(query_pixel(grid_layer, -109.95, 34.95)["value"])
    assert query_pixel(grid_layer, -120.0, 34.5) is None


def test_query_pixel_transforms_coordinate(grid_layer):
    from pyproj import Transformer

    x, y = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True).transform(-109.45, 34.45)
    pixel = query_pixel(grid_layer, x, y, crs="EPSG:3857")

    assert (pixel["row"], pixel["col"]) == (5, 5)
