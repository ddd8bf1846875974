# -*- coding: utf-8 -*-
"""Helpers, mostly the synthetic workshop dataset.

The lessons are written against real downloads (phenometrics, GNIS, Spring Index rasters, state boundaries). For
offline runs and tests :func:`create_sample_data` writes a small stand-in dataset with the same file formats and
column layout over the US Southwest.
"""

import os

import geopandas as gpd
import numpy as np
import pandas as pd
from rasterio.transform import from_origin
from shapely.geometry import box

from ..io.raster import write_raster
from ..io.vector import write_vector

SAMPLE_FILES = {
    "regions": "regions.geojson",
    "phenometrics": "phenometrics.csv",
    "gnis": "gnis_features.txt",
    "spring_index": "si_first_leaf.tif",
}

RASTER_NODATA = -9999.0

# (lon, lat) of the synthetic observation sites
SITES = [
    (-111.65, 35.20),
    (-111.90, 33.45),
    (-110.95, 32.25),
    (-112.45, 34.55),
    (-109.80, 34.10),
    (-106.65, 35.10),
    (-105.95, 35.70),
    (-106.75, 32.30),
    (-104.50, 33.40),
    (-108.20, 36.70),
]

SPECIES = [
    # genus, species, common name, offset from the model in days
    ("Populus", "tremuloides", "quaking aspen", -6),
    ("Prunus", "virginiana", "chokecherry", 2),
    ("Quercus", "gambelii", "Gambel oak", 12),
]

GNIS_FEATURES = [
    ("1", "Humphreys Peak", "Summit", "AZ", 35.3464, -111.6780, 3851),
    ("2", "Mount Baldy", "Summit", "AZ", 33.9067, -109.5625, 3476),
    ("3", "Mount Lemmon", "Summit", "AZ", 32.4430, -110.7880, 2791),
    ("4", "Wheeler Peak", "Summit", "NM", 36.5569, -105.4169, 4011),
    ("5", "Sandia Crest", "Summit", "NM", 35.2106, -106.4494, 3255),
    ("6", "Sierra Blanca Peak", "Summit", "NM", 33.3741, -105.8086, 3652),
    ("7", "Lake Mary", "Lake", "AZ", 35.1050, -111.5690, 2069),
    ("8", "Elephant Butte Reservoir", "Reservoir", "NM", 33.2370, -107.2270, 1344),
    ("9", "Unlocated Spring", "Spring", "NM", 0.0, 0.0, 0),
]


def sample_paths(data_dir):
    """Paths of the sample files inside ``data_dir``."""
    return {key: os.path.join(data_dir, name) for key, name in SAMPLE_FILES.items()}


def _model_doy(lon, lat):
    """Smooth first-leaf surface: later to the north and at the mountain block in the middle."""
    mountains = 18 * np.exp(-(((lon + 108.5) / 2.0) ** 2 + ((lat - 35.0) / 1.5) ** 2))
    return 55 + 6.5 * (lat - 31.0) + 1.2 * (lon + 115.0) + mountains


def create_sample_data(data_dir, seed=42):
    """Write the synthetic workshop dataset.

    Parameters:
    -----------
    data_dir : str
        Directory to write into (created if needed)
    seed : int
        Seed for the random observation noise

    Returns:
    --------
    paths : dict
        "regions", "phenometrics", "gnis" and "spring_index" file paths
    """
    os.makedirs(data_dir, exist_ok=True)
    paths = sample_paths(data_dir)
    rng = np.random.default_rng(seed)

    regions = gpd.GeoDataFrame(
        {"name": ["Arizona", "New Mexico"], "state": ["AZ", "NM"]},
        geometry=[box(-114.8, 31.3, -109.05, 37.0), box(-109.05, 31.3, -103.0, 37.0)],
        crs="EPSG:4326",
    )
    write_vector(regions, paths["regions"])

    # 0.1 degree grid over both states with an unmodelled corner
    resolution = 0.1
    west, north = -115.0, 37.5
    height, width = 65, 130
    transform = from_origin(west, north, resolution, resolution)
    lon = west + resolution * (np.arange(width) + 0.5)
    lat = north - resolution * (np.arange(height) + 0.5)
    lon_grid, lat_grid = np.meshgrid(lon, lat)
    grid = _model_doy(lon_grid, lat_grid).astype(np.float32)
    grid[:8, -12:] = RASTER_NODATA
    write_raster(paths["spring_index"], grid, transform, "EPSG:4326", nodata=RASTER_NODATA)

    rows = []
    individual = 1000
    for site_id, (site_lon, site_lat) in enumerate(SITES, start=1):
        state = "AZ" if site_lon < -109.05 else "NM"
        for genus, species, common_name, offset in SPECIES:
            individual += 1
            for year in (2019, 2020, 2021):
                doy = int(round(_model_doy(site_lon, site_lat) + offset + rng.normal(0, 3)))
                if rng.random() < 0.08:
                    doy = -9999
                rows.append(
                    {
                        "site_id": site_id,
                        "latitude": site_lat,
                        "longitude": site_lon,
                        "elevation_in_meters": int(rng.integers(800, 2800)),
                        "state": state,
                        "individual_id": individual,
                        "species_id": SPECIES.index((genus, species, common_name, offset)) + 1,
                        "genus": genus,
                        "species": species,
                        "common_name": common_name,
                        "phenophase_id": 371,
                        "phenophase_description": "Breaking leaf buds",
                        "first_yes_year": year,
                        "first_yes_month": 0,
                        "first_yes_day": 0,
                        "first_yes_doy": doy,
                    }
                )
    phenometrics = pd.DataFrame(rows)
    valid = phenometrics["first_yes_doy"] != -9999
    dates = pd.to_datetime(phenometrics.loc[valid, "first_yes_year"].astype(str) + "-01-01") + pd.to_timedelta(
        phenometrics.loc[valid, "first_yes_doy"] - 1, unit="D"
    )
    phenometrics.loc[valid, "first_yes_month"] = dates.dt.month
    phenometrics.loc[valid, "first_yes_day"] = dates.dt.day
    phenometrics.loc[~valid, ["first_yes_month", "first_yes_day"]] = -9999
    phenometrics.to_csv(paths["phenometrics"], index=False)

    gnis = pd.DataFrame(
        GNIS_FEATURES,
        columns=["FEATURE_ID", "FEATURE_NAME", "FEATURE_CLASS", "STATE_ALPHA", "PRIM_LAT_DEC", "PRIM_LONG_DEC", "ELEV_IN_M"],
    )
    gnis.to_csv(paths["gnis"], sep="|", index=False)

    return paths
