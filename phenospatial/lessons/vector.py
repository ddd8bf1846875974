# -*- coding: utf-8 -*-
"""Lesson 1: vector data.

Observation sites are points, states are polygons and GNIS summits are points published in NAD83. The lesson joins
sites to the state they fall in, shows the same layers before and after projecting to an equal-area CRS, buffers
the sites by a distance on the ground, intersects the buffers with the states and measures how far each site is
from the nearest summit.
"""

import os

import matplotlib.pyplot as plt

from ..config import load_config
from ..core.geometry import buffer_points, distance_to_nearest, intersect_layers, points_in_polygons
from ..core.layer import Layer
from ..core.projection import crs_name, reproject_vector
from ..io.vector import write_vector
from ..viz.maps import plot_categories, plot_comparison
from .data import load_workshop_data

SHAPEFILE_COLUMNS = {
    "site": "site",
    "species_name": "species",
    "mean_doy": "mean_doy",
    "n_obs": "n_obs",
    "state": "state",
    "nearest_km": "summit_km",
    "nearest_name": "summit",
}


def run(paths, output_dir="output", config=None, data=None):
    """Run the vector lesson and write its figures and shapefile to ``output_dir``."""
    config = config or load_config()
    os.makedirs(output_dir, exist_ok=True)

    data = data or load_workshop_data(paths)
    manager = data["manager"]
    sites, regions, gnis = data["sites"], data["regions"], data["gnis"]

    print(f"Sites: {len(sites.objects)} site/species rows in {crs_name(sites.crs)}")
    print(f"Regions: {', '.join(regions.objects['name'])} in {crs_name(regions.crs)}")
    print(f"GNIS features: {len(gnis.objects)} in {crs_name(gnis.crs)}")

    print("\nJoining sites to states...")
    sites_in_states = points_in_polygons(sites, regions, how="left", layer_manager=manager, layer_name="sites_in_states")
    print(sites_in_states.objects.groupby("state")["site"].nunique().to_string())

    fig1 = plot_categories(sites_in_states, class_field="species_name", background=regions)
    fig1.savefig(os.path.join(output_dir, "1_sites_by_species.png"))
    plt.close(fig1)

    print("\nProjecting to an equal-area CRS...")
    projected_crs = config["crs"]["projected"]
    regions_projected = reproject_vector(regions, projected_crs, layer_manager=manager)
    sites_projected = reproject_vector(sites_in_states, projected_crs, layer_manager=manager)
    fig2 = plot_comparison(regions, regions_projected, title="Geographic vs projected coordinates")
    fig2.savefig(os.path.join(output_dir, "2_reprojection.png"))
    plt.close(fig2)

    areas_km2 = regions_projected.objects.geometry.area / 1e6
    for name, area in zip(regions_projected.objects["name"], areas_km2):
        print(f"  {name}: {area:,.0f} km2")

    buffer_m = config["analysis"]["buffer_m"]
    print(f"\nBuffering sites by {buffer_m} m...")
    site_points = Layer.from_objects(
        sites_projected.objects.drop_duplicates(subset="site")[["site", "state", "geometry"]],
        name="site_points",
        parent=sites_projected,
    )
    buffers = buffer_points(site_points, buffer_m, layer_manager=manager)
    pieces = intersect_layers(
        buffers,
        Layer.from_objects(regions_projected.objects[["name", "geometry"]], name="state_polygons"),
        layer_manager=manager,
        layer_name="buffers_by_state",
    )
    crossing = pieces.objects.groupby("site")["name"].nunique()
    print(f"  {int((crossing > 1).sum())} buffer(s) cross a state line")

    feature_class = config["analysis"].get("gnis_feature_class")
    summits = gnis
    if feature_class:
        summits = Layer.from_objects(
            gnis.objects[gnis.objects["FEATURE_CLASS"] == feature_class], name=f"gnis_{feature_class.lower()}", parent=gnis
        )
    print(f"\nMeasuring distance to the nearest {feature_class or 'GNIS feature'}...")
    nearest = distance_to_nearest(sites_in_states, summits, name_column="FEATURE_NAME", layer_manager=manager)
    for _, row in nearest.objects.drop_duplicates(subset="site").iterrows():
        print(f"  site {row['site']}: {row['nearest_km']:.1f} km to {row['nearest_name']}")

    print("\nExporting results...")
    export = nearest.objects[list(SHAPEFILE_COLUMNS) + ["geometry"]].rename(columns=SHAPEFILE_COLUMNS)
    shapefile_path = os.path.join(output_dir, "sites_nearest_summit.shp")
    write_vector(export, shapefile_path)
    write_vector(buffers.objects, os.path.join(output_dir, "site_buffers.geojson"))

    return {
        "manager": manager,
        "sites_in_states": sites_in_states,
        "buffers": buffers,
        "buffers_by_state": pieces,
        "nearest": nearest,
        "shapefile": shapefile_path,
    }
