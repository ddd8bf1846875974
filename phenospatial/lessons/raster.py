# -*- coding: utf-8 -*-
"""Lesson 2: raster data.

The Spring Index first-leaf raster predicts, for every grid cell, the day of year leaves come out. The lesson
summarizes it, crops it to one state, projects it to an equal-area grid, reads the predicted day at each observation
site and compares prediction with observation: sites leafing out more than a tolerance before the model are "early",
after it "late".
"""

import os

import matplotlib.pyplot as plt

from ..config import load_config
from ..core.layer import Layer
from ..core.palette import bin_values
from ..core.phenology import compare_to_raster
from ..core.projection import crs_equal, reproject_raster, to_pyproj
from ..core.raster_ops import crop_raster
from ..io.raster import layer_to_raster
from ..stats.summary import attach_basic_stats, attach_class_distribution, raster_summary
from ..viz.charts import plot_histogram, plot_scatter
from ..viz.maps import plot_categories, plot_comparison, plot_layer
from .data import load_workshop_data

DOY_BINS = [0, 60, 90, 120, 366]
DOY_LABELS = ["before March", "March", "April", "May or later"]


def run(paths, output_dir="output", config=None, data=None, crop_state="AZ"):
    """Run the raster lesson and write its figures and GeoTIFFs to ``output_dir``."""
    config = config or load_config()
    os.makedirs(output_dir, exist_ok=True)

    data = data or load_workshop_data(paths)
    manager = data["manager"]
    spring_index, regions, sites = data["spring_index"], data["regions"], data["sites"]

    print(spring_index)
    for band, stats in raster_summary(spring_index).items():
        print(f"  {band}: DOY {stats['min']:.0f}-{stats['max']:.0f}, mean {stats['mean']:.1f} ({stats['valid_cells']} cells)")

    fig1 = plot_layer(regions, raster_layer=spring_index, title="Spring Index first leaf (DOY)", raster_cmap="viridis")
    fig1.savefig(os.path.join(output_dir, "3_spring_index.png"))
    plt.close(fig1)

    print(f"\nCropping to {crop_state}...")
    state = Layer.from_objects(regions.objects[regions.objects["state"] == crop_state], name=crop_state, parent=regions)
    if state.objects.empty:
        raise ValueError(f"State '{crop_state}' not found in regions")
    cropped = crop_raster(spring_index, geometry=state, layer_manager=manager, layer_name=f"spring_index_{crop_state}")
    print(cropped)

    print("\nProjecting the cropped grid...")
    projected = reproject_raster(cropped, config["crs"]["projected"], resampling="bilinear", layer_manager=manager)
    print(projected)
    fig2 = plot_comparison(cropped, projected, title=f"Spring Index over {crop_state}: geographic vs projected grid")
    fig2.savefig(os.path.join(output_dir, "4_cropped_reprojected.png"))
    plt.close(fig2)

    print("\nComparing observations with the model...")
    tolerance = config["analysis"]["anomaly_tolerance_days"]
    compared = compare_to_raster(sites, spring_index, tolerance=tolerance, layer_manager=manager)
    compared.objects["predicted_month"] = bin_values(compared.objects["predicted_doy"], DOY_BINS, DOY_LABELS).astype(str).to_numpy()
    compared.attach_function(attach_basic_stats, name="anomaly_stats", column="anomaly")
    compared.attach_function(attach_class_distribution, name="timing_distribution", class_column="timing")

    stats = compared.get_function_result("anomaly_stats")
    print(f"  mean anomaly {stats['mean']:+.1f} days (sd {stats['std']:.1f})")
    for timing, count in compared.get_function_result("timing_distribution")["counts"].items():
        print(f"  {timing}: {count}")

    fig3 = plot_categories(compared, class_field="timing", class_color=config["palette"]["anomaly"], background=regions)
    fig3.savefig(os.path.join(output_dir, "5_timing.png"))
    plt.close(fig3)

    fig4 = plot_scatter(compared, "predicted_doy", "mean_doy", color_by="species_name", one_to_one=True)
    fig4.savefig(os.path.join(output_dir, "6_observed_vs_predicted.png"))
    plt.close(fig4)

    fig5 = plot_histogram(compared, "anomaly", bins=15, by_class="species_name")
    fig5.savefig(os.path.join(output_dir, "7_anomaly_histogram.png"))
    plt.close(fig5)

    print("\nExporting results...")
    cropped_path = os.path.join(output_dir, f"spring_index_{crop_state}.tif")
    layer_to_raster(cropped, cropped_path)
    states_path = os.path.join(output_dir, "states.tif")
    state_codes = layer_to_raster(_on_grid(regions, spring_index), states_path, column="state")
    print(f"  state codes: {state_codes}")

    return {
        "manager": manager,
        "cropped": cropped,
        "projected": projected,
        "compared": compared,
        "cropped_path": cropped_path,
        "states_path": states_path,
    }


def _on_grid(vector_layer, raster_layer):
    """Vector layer carrying the raster's grid so it can be burnt cell for cell onto it."""
    gridded = raster_layer.derive(f"{vector_layer.name}_on_{raster_layer.name}")
    gridded.objects = vector_layer.objects
    if not crs_equal(vector_layer.crs, raster_layer.crs):
        gridded.objects = vector_layer.objects.to_crs(to_pyproj(raster_layer.crs))
    gridded.raster = raster_layer.raster
    gridded.nodata = 0
    return gridded
