# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd
import pytest

from phenospatial import (
    classify_anomaly,
    compare_to_raster,
    filter_phenometrics,
    read_phenometrics,
    sites_to_layer,
    summarize_sites,
    tidy_phenometrics,
)


@pytest.fixture
def download():
    """Phenometric rows for two sites, one of them with a missing first-yes day."""
    return pd.DataFrame(
        {
            "site_id": [1, 1, 1, 2],
            "latitude": [34.45, 34.45, 34.45, 34.95],
            "longitude": [-109.45, -109.45, -109.45, -109.95],
            "genus": ["Populus", "Populus", "Quercus", "Populus"],
            "species": ["tremuloides", "tremuloides", "gambelii", "tremuloides"],
            "common_name": ["quaking aspen", "quaking aspen", "Gambel oak", "quaking aspen"],
            "phenophase_description": ["Breaking leaf buds"] * 3 + ["Open flowers"],
            "first_yes_year": [2019, 2020, 2019, 2019],
            "first_yes_doy": [60, 70, -9999, 90],
            "first_yes_month": [3, 3, -9999, 3],
        }
    )


def test_tidy_renames_and_masks_missing(download):
    tidy = tidy_phenometrics(download)

    assert {"site", "lat", "lon", "year", "doy", "phenophase", "species_name"}.issubset(tidy.columns)
    assert "first_yes_month" not in tidy.columns
    assert np.isnan(tidy.loc[2, "doy"])
    assert tidy.loc[0, "species_name"] == "Populus tremuloides"


def test_tidy_requires_columns(download):
    with pytest.raises(ValueError, match="first_yes_doy"):
        tidy_phenometrics(download.drop(columns=["first_yes_doy"]))


def test_read_phenometrics(sample_paths):
    tidy = read_phenometrics(sample_paths["phenometrics"])

    assert set(tidy["species_name"]) == {"Populus tremuloides", "Prunus virginiana", "Quercus gambelii"}
    assert (tidy["doy"].dropna() > 0).all()


def test_filter_by_common_name_phenophase_and_year(download):
    tidy = tidy_phenometrics(download)

    assert len(filter_phenometrics(tidy, species="quaking aspen")) == 3
    assert len(filter_phenometrics(tidy, species=["Quercus gambelii"])) == 1
    assert len(filter_phenometrics(tidy, phenophase="Breaking leaf buds", years=[2020])) == 1
    assert filter_phenometrics(tidy, species="saguaro").empty


def test_filter_accepts_numpy_scalars(download):
    tidy = tidy_phenometrics(download)

    assert len(filter_phenometrics(tidy, years=np.int64(2020))) == 1
    assert len(filter_phenometrics(tidy, years=np.array([2019]))) == 3


def test_summarize_sites_ignores_missing(download):
    summary = summarize_sites(tidy_phenometrics(download))

    assert list(summary.columns) == ["site", "species_name", "lat", "lon", "mean_doy", "min_doy", "max_doy", "n_obs"]
    aspen = summary[(summary["site"] == 1) & (summary["species_name"] == "Populus tremuloides")].iloc[0]
    assert aspen["mean_doy"] == 65
    assert aspen["min_doy"] == 60
    assert aspen["max_doy"] == 70
    assert aspen["n_obs"] == 2
    # the oak row has no observed day
    assert len(summary) == 2


def test_classify_anomaly_boundaries():
    labels = classify_anomaly([-8, -7, 0, 7, 8, np.nan], tolerance=7)

    assert list(labels[:5]) == ["early", "on time", "on time", "on time", "late"]
    assert pd.isna(labels[5])
    assert list(labels.cat.categories) == ["early", "on time", "late"]


def test_compare_to_raster(download, grid_layer):
    sites = sites_to_layer(summarize_sites(tidy_phenometrics(download)))

    compared = compare_to_raster(sites, grid_layer, tolerance=7)
    row = compared.objects.iloc[0]

    # site 1 sits on the cell holding 55
    assert row["predicted_doy"] == 55
    assert row["anomaly"] == 10
    assert row["timing"] == "late"
    assert compared.metadata["tolerance"] == 7
    assert compared.parent is sites


def test_compare_to_raster_requires_observed_column(download, grid_layer):
    sites = sites_to_layer(summarize_sites(tidy_phenometrics(download)))

    with pytest.raises(ValueError, match="not found"):
        compare_to_raster(sites, grid_layer, observed="median_doy")
