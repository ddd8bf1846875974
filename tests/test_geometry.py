# -*- coding: utf-8 -*-
import geopandas as gpd
import numpy as np
import pytest
from shapely.geometry import Point

from phenospatial import (
    Layer,
    LayerManager,
    buffer_points,
    distance_to_nearest,
    great_circle_distance,
    intersect_layers,
    points_in_polygons,
    reproject_vector,
)


def test_one_degree_of_latitude():
    assert great_circle_distance(-110.0, 34.0, -110.0, 35.0) == pytest.approx(111.195, rel=1e-3)


def test_great_circle_distance_is_symmetric_and_zero_on_itself():
    lons = np.array([-111.65, -106.65, 2.35])
    lats = np.array([35.20, 35.10, 48.86])

    forward = great_circle_distance(lons[:, None], lats[:, None], lons[None, :], lats[None, :])

    np.testing.assert_allclose(forward, forward.T)
    np.testing.assert_allclose(np.diag(forward), 0.0, atol=1e-9)


def test_buffer_is_round_on_the_ground():
    site = Layer.from_objects(gpd.GeoDataFrame({"site": [1]}, geometry=[Point(-111.65, 35.2)], crs="EPSG:4326"), name="site")

    buffered = buffer_points(site, 1000)

    assert buffered.crs == site.crs
    utm = buffered.objects.estimate_utm_crs()
    area = buffered.objects.to_crs(utm).geometry.area.iloc[0]
    assert area == pytest.approx(np.pi * 1000**2, rel=0.01)
    assert buffered.name == "site_buffer_1000m"
    assert buffered.metadata["work_crs"].startswith("EPSG:326")


def test_buffer_rejects_negative_distance(points_layer):
    with pytest.raises(ValueError):
        buffer_points(points_layer, -5)


def test_points_in_polygons(points_layer, halves_layer):
    manager = LayerManager()

    inner = points_in_polygons(points_layer, halves_layer, layer_manager=manager)
    left = points_in_polygons(points_layer, halves_layer, how="left")

    assert list(inner.objects["half"]) == ["west", "east"]
    assert inner.metadata["matched"] == 2
    assert len(left.objects) == 3
    assert left.objects["half"].isna().sum() == 1
    assert "index_right" not in left.objects.columns
    assert manager.get_layer("points_in_halves") is inner


def test_combining_layers_in_different_crs_raises(points_layer, halves_layer):
    projected = reproject_vector(halves_layer, "EPSG:3857")

    with pytest.raises(ValueError, match="CRS mismatch"):
        points_in_polygons(points_layer, projected)
    with pytest.raises(ValueError, match="CRS mismatch"):
        intersect_layers(halves_layer, projected)


def test_intersect_layers(halves_layer):
    site = Layer.from_objects(
        gpd.GeoDataFrame({"site": [1]}, geometry=[Point(-109.5, 34.5)], crs="EPSG:4326"), name="site"
    )
    buffers = buffer_points(site, 5000)

    pieces = intersect_layers(buffers, halves_layer)

    assert sorted(pieces.objects["half"]) == ["east", "west"]
    assert (pieces.objects["site"] == 1).all()
    total = pieces.objects.to_crs(3857).area.sum()
    assert total == pytest.approx(buffers.objects.to_crs(3857).area.sum(), rel=1e-6)


def test_distance_to_nearest(points_layer):
    summits = Layer.from_objects(
        gpd.GeoDataFrame(
            {"FEATURE_NAME": ["near", "far"]},
            geometry=[Point(-109.45, 35.45), Point(0.0, 51.5)],
            crs="EPSG:4269",
        ),
        name="summits",
    )

    nearest = distance_to_nearest(points_layer, summits, name_column="FEATURE_NAME")

    inside = nearest.objects[nearest.objects["name"] == "inside"].iloc[0]
    assert inside["nearest_name"] == "near"
    assert inside["nearest_km"] == pytest.approx(111.195, rel=1e-3)
    assert "nearest_km" not in points_layer.objects.columns


def test_distance_to_nearest_rejects_unknown_column(points_layer):
    with pytest.raises(ValueError, match="not found"):
        distance_to_nearest(points_layer, points_layer, name_column="missing")


def test_buffer_segments_without_deprecation(points_layer, recwarn):
    coarse = buffer_points(points_layer, 1000, quad_segs=2)

    # a quarter circle of two segments gives an octagon
    assert len(coarse.objects.geometry.iloc[1].exterior.coords) == 9
    assert not [w for w in recwarn if issubclass(w.category, DeprecationWarning) and "resolution" in str(w.message)]
