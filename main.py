# -*- coding: utf-8 -*-
"""Workshop runner.

Runs the vector, raster and web map lessons one after the other. Without a data directory the synthetic sample
dataset is written to ``<output_dir>/data`` first.
"""

import logging
import os

from phenospatial.config import get_path, load_config
from phenospatial.lessons import raster, vector, webmap
from phenospatial.lessons.data import load_workshop_data
from phenospatial.utils.helpers import create_sample_data, sample_paths


def run_example(data_dir=None, output_dir=None, config_path=None):
    """Run all lessons."""
    config = load_config(config_path)
    data_dir = data_dir or get_path(config, "data_dir")
    output_dir = output_dir or get_path(config, "output_dir", default="output")
    os.makedirs(output_dir, exist_ok=True)

    if data_dir and os.path.exists(data_dir):
        print(f"Reading workshop data from {data_dir}...")
        paths = sample_paths(data_dir)
        missing = [path for path in paths.values() if not os.path.exists(path)]
        if missing:
            raise ValueError(f"Workshop files not found: {missing}")
    else:
        data_dir = os.path.join(output_dir, "data")
        print(f"No data directory given, writing sample data to {data_dir}...")
        paths = create_sample_data(data_dir)

    data = load_workshop_data(paths, gnis_feature_class=None)

    print("\n=== Lesson 1: vector data ===")
    vector.run(paths, output_dir=output_dir, config=config, data=data)

    print("\n=== Lesson 2: raster data ===")
    raster.run(paths, output_dir=output_dir, config=config, data=data)

    print("\n=== Lesson 3: web map ===")
    webmap.run(paths, output_dir=output_dir, config=config, data=data)

    manager = data["manager"]
    print(f"\nResults saved to {output_dir}")
    print("Available layers:")
    for i, layer_name in enumerate(manager.get_layer_names()):
        print(f"  {i + 1}. {layer_name}")

    return manager


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run_example()
