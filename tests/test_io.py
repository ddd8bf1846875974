# -*- coding: utf-8 -*-
import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
import rasterio

from phenospatial import (
    LayerManager,
    layer_to_raster,
    layer_to_vector,
    read_gnis,
    read_points_csv,
    read_raster,
    read_raster_layer,
    read_vector_layer,
    write_vector,
)
from phenospatial.core.projection import crs_equal


def test_read_gnis(sample_paths):
    features = read_gnis(sample_paths["gnis"])

    assert len(features) == 8
    assert "Unlocated Spring" not in set(features["FEATURE_NAME"])
    assert crs_equal(features.crs, "EPSG:4269")

    summits = read_gnis(sample_paths["gnis"], feature_class="Summit", state="AZ")
    assert sorted(summits["FEATURE_NAME"]) == ["Humphreys Peak", "Mount Baldy", "Mount Lemmon"]
    assert summits.geometry.x.iloc[0] == pytest.approx(-111.678)


def test_read_gnis_rejects_other_tables(tmp_path):
    path = tmp_path / "not_gnis.txt"
    path.write_text("a|b\n1|2\n")

    with pytest.raises(ValueError, match="GNIS"):
        read_gnis(str(path))


def test_read_points_csv_drops_unlocated_rows(tmp_path):
    path = tmp_path / "sites.csv"
    pd.DataFrame({"site": [1, 2, 3], "longitude": [-111.6, None, -106.6], "latitude": [35.2, 33.4, 35.1]}).to_csv(
        path, index=False
    )

    points = read_points_csv(str(path))

    assert list(points["site"]) == [1, 3]
    assert crs_equal(points.crs, "EPSG:4326")
    with pytest.raises(ValueError, match="coordinate"):
        read_points_csv(str(path), lon_column="x")


def test_vector_round_trip(sample_paths, tmp_path):
    manager = LayerManager()
    regions = read_vector_layer(sample_paths["regions"], layer_manager=manager)

    assert regions.name == "regions"
    assert manager.get_layer("regions") is regions

    out = tmp_path / "out" / "regions.gpkg"
    layer_to_vector(regions, str(out))
    assert list(gpd.read_file(out)["state"]) == ["AZ", "NM"]


def test_write_vector_rejects_unknown_extension(sample_paths, tmp_path):
    regions = read_vector_layer(sample_paths["regions"])

    with pytest.raises(ValueError, match="Unsupported"):
        write_vector(regions.objects, str(tmp_path / "regions.csv"))


def test_read_raster_layer(sample_paths):
    layer = read_raster_layer(sample_paths["spring_index"])
    data, transform, crs = read_raster(sample_paths["spring_index"])

    assert layer.name == "si_first_leaf"
    assert layer.raster.shape == data.shape == (1, 65, 130)
    assert layer.nodata == -9999
    assert layer.metadata["resolution"] == pytest.approx((0.1, 0.1))
    assert transform == layer.transform
    assert crs.to_epsg() == 4326


def test_categorical_layer_to_raster(sample_paths, tmp_path):
    regions = read_vector_layer(sample_paths["regions"])
    out = tmp_path / "states.tif"

    value_map = layer_to_raster(regions, str(out), column="state", resolution=0.5)

    assert value_map == {"AZ": 1, "NM": 2}
    with rasterio.open(out) as src:
        codes = src.read(1)
        assert src.nodata == 0
    assert set(np.unique(codes)) <= {0, 1, 2}
    assert {1, 2} <= set(np.unique(codes))


@pytest.mark.parametrize("dtype", ["category", "string"])
def test_layer_to_raster_with_extension_dtypes(sample_paths, tmp_path, dtype):
    regions = read_vector_layer(sample_paths["regions"])
    regions.objects["state"] = regions.objects["state"].astype(dtype)
    out = tmp_path / f"states_{dtype}.tif"

    value_map = layer_to_raster(regions, str(out), column="state", resolution=0.5)

    assert value_map == {"AZ": 1, "NM": 2}
    with rasterio.open(out) as src:
        assert {1, 2} <= set(np.unique(src.read(1)))


def test_layer_to_raster_burns_numeric_values(sample_paths, tmp_path):
    regions = read_vector_layer(sample_paths["regions"])
    regions.objects["code"] = pd.array([35, 4], dtype="Int64")
    out = tmp_path / "codes.tif"

    assert layer_to_raster(regions, str(out), column="code", resolution=0.5) == {}
    with rasterio.open(out) as src:
        assert {4, 35} <= set(np.unique(src.read(1)))


def test_layer_to_raster_needs_a_column(sample_paths, tmp_path):
    regions = read_vector_layer(sample_paths["regions"])

    with pytest.raises(ValueError):
        layer_to_raster(regions, str(tmp_path / "states.tif"))
    with pytest.raises(ValueError, match="not found"):
        layer_to_raster(regions, str(tmp_path / "states.tif"), column="missing")
