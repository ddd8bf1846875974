# -*- coding: utf-8 -*-
"""Phenometric helpers for the lessons.

Phenometric downloads (for example USA National Phenology Network individual phenometrics) have one row per
individual plant, phenophase and year with the day of year (DOY) the phenophase was first observed. These helpers
rename the download to short lesson column names, filter it, summarize it per site and compare the observations
with a gridded phenology model such as a Spring Index first-leaf raster.
"""

import logging

import numpy as np
import pandas as pd

from ..io.vector import points_from_frame
from .layer import Layer, register
from .raster_ops import extract_values

logger = logging.getLogger(__name__)

MISSING_VALUE = -9999

COLUMN_NAMES = {
    "site_id": "site",
    "latitude": "lat",
    "longitude": "lon",
    "elevation_in_meters": "elevation",
    "state": "state",
    "individual_id": "individual",
    "species_id": "species_id",
    "genus": "genus",
    "species": "species",
    "common_name": "common_name",
    "phenophase_id": "phenophase_id",
    "phenophase_description": "phenophase",
    "first_yes_year": "year",
    "first_yes_doy": "doy",
}

REQUIRED_COLUMNS = [
    "site_id",
    "latitude",
    "longitude",
    "genus",
    "species",
    "common_name",
    "phenophase_description",
    "first_yes_year",
    "first_yes_doy",
]

ANOMALY_CATEGORIES = ["early", "on time", "late"]


def tidy_phenometrics(df):
    """Rename a phenometric download to lesson column names.

    Keeps only the known columns, turns the -9999 missing-value sentinel into NaN and adds ``species_name``
    ("Genus species").
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Phenometric table is missing columns: {missing}")

    keep = [c for c in COLUMN_NAMES if c in df.columns]
    tidy = df[keep].rename(columns=COLUMN_NAMES)
    tidy = tidy.replace(MISSING_VALUE, np.nan)
    tidy["species_name"] = tidy["genus"].str.strip() + " " + tidy["species"].str.strip()

    return tidy


def read_phenometrics(csv_path):
    """Read and tidy a phenometric CSV download."""
    return tidy_phenometrics(pd.read_csv(csv_path))


def filter_phenometrics(df, species=None, phenophase=None, years=None):
    """Subset tidy phenometrics by species name or common name, phenophase and years.

    Each filter accepts a single value or a list.
    """

    def as_list(value):
        return [value] if pd.api.types.is_scalar(value) else list(value)

    selected = df
    if species is not None:
        names = as_list(species)
        selected = selected[selected["species_name"].isin(names) | selected["common_name"].isin(names)]
    if phenophase is not None:
        selected = selected[selected["phenophase"].isin(as_list(phenophase))]
    if years is not None:
        selected = selected[selected["year"].isin(as_list(years))]

    if selected.empty:
        logger.info("Filter species=%s phenophase=%s years=%s matched no records", species, phenophase, years)

    return selected.reset_index(drop=True)


def summarize_sites(df, value_column="doy", by=("site", "species_name")):
    """One row per site (and species) with mean, min and max of ``value_column`` and the observation count.

    Rows without a value are ignored; site coordinates are carried along.
    """
    if value_column not in df.columns:
        raise ValueError(f"Column '{value_column}' not found in phenometric table")

    by = list(by)
    observed = df.dropna(subset=[value_column])
    summary = (
        observed.groupby(by, as_index=False)
        .agg(
            lat=("lat", "first"),
            lon=("lon", "first"),
            **{
                f"mean_{value_column}": (value_column, "mean"),
                f"min_{value_column}": (value_column, "min"),
                f"max_{value_column}": (value_column, "max"),
                "n_obs": (value_column, "count"),
            },
        )
        .sort_values(by)
        .reset_index(drop=True)
    )
    return summary


def sites_to_layer(summary, name="sites", layer_manager=None):
    """Point layer (EPSG:4326) from a table with ``lat``/``lon`` columns."""
    layer = Layer.from_objects(points_from_frame(summary, lon_column="lon", lat_column="lat"), name=name)
    layer.metadata = {"operation": "sites_to_layer"}
    return register(layer, layer_manager)


def classify_anomaly(values, tolerance=7):
    """Label anomalies (days) as "early", "on time" or "late"; ``|anomaly| <= tolerance`` is on time."""
    values = pd.Series(values, dtype=float)
    days = values.to_numpy()
    labels = np.select(
        [days < -tolerance, days > tolerance, ~np.isnan(days)],
        ["early", "late", "on time"],
        default=None,
    )
    return pd.Series(pd.Categorical(labels, categories=ANOMALY_CATEGORIES), index=values.index)


def compare_to_raster(
    sites_layer,
    raster_layer,
    observed="mean_doy",
    predicted="predicted_doy",
    tolerance=7,
    band=1,
    layer_manager=None,
    layer_name=None,
):
    """Sample a gridded model at the sites and compare it with the observations.

    Adds ``predicted`` (the raster value), ``anomaly`` (observed minus predicted, in days) and ``timing``
    (:func:`classify_anomaly`) columns.
    """
    if sites_layer.objects is None or observed not in sites_layer.objects.columns:
        raise ValueError(f"Column '{observed}' not found in layer objects")

    sampled = extract_values(raster_layer, sites_layer, band=band, column=predicted)
    objects = sampled.objects
    objects["anomaly"] = objects[observed] - objects[predicted]
    objects["timing"] = classify_anomaly(objects["anomaly"], tolerance=tolerance).to_numpy()

    result_layer = sites_layer.derive(layer_name or f"{sites_layer.name}_vs_{raster_layer.name}")
    result_layer.objects = objects
    result_layer.metadata = {
        "operation": "compare_to_raster",
        "raster": raster_layer.name,
        "tolerance": tolerance,
    }

    return register(result_layer, layer_manager)
