# -*- coding: utf-8 -*-
"""Lesson 3: an interactive web map.

The observation sites go on a tiled basemap as circle markers colored by species, the Spring Index raster is drawn
underneath, a legend and a title are added, and clicking anywhere shows the predicted first-leaf day of the cell
under the cursor. The map is saved as a standalone HTML page.
"""

import os

from ..config import load_config
from ..core.phenology import compare_to_raster
from ..viz.webmap import build_web_map, save_web_map
from .data import load_workshop_data

POPUP_COLUMNS = ["site", "species_name", "mean_doy", "predicted_doy", "anomaly", "timing", "n_obs"]


def run(paths, output_dir="output", config=None, data=None, color_column="species_name"):
    """Build the web map and save it to ``output_dir/phenology_map.html``."""
    config = config or load_config()
    os.makedirs(output_dir, exist_ok=True)

    data = data or load_workshop_data(paths)
    manager = data["manager"]
    spring_index = data["spring_index"]

    compared = compare_to_raster(
        data["sites"],
        spring_index,
        tolerance=config["analysis"]["anomaly_tolerance_days"],
        layer_manager=manager,
        layer_name="sites_for_map",
    )

    palette = {
        "timing": config["palette"]["anomaly"],
        "anomaly": config["palette"]["diverging"],
    }.get(color_column, config["palette"]["categorical"])
    phenophase = data["sites"].metadata.get("phenophase", "first leaf")

    print("Building web map...")
    fmap = build_web_map(
        compared,
        color_column=color_column,
        palette=palette,
        title=f"{phenophase}: observed sites and Spring Index first leaf",
        raster_layer=spring_index,
        raster_cmap=config["palette"]["continuous"],
        outline_layer=data["regions"],
        popup_columns=POPUP_COLUMNS,
        tiles=config["webmap"]["tiles"],
        zoom_start=config["webmap"]["zoom_start"],
        overlay_opacity=config["webmap"]["overlay_opacity"],
    )

    html_path = save_web_map(fmap, os.path.join(output_dir, "phenology_map.html"))
    print(f"  saved {html_path}")

    return {"manager": manager, "map": fmap, "html": html_path, "compared": compared}
