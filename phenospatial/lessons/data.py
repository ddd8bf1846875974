# -*- coding: utf-8 -*-
"""Loads the workshop dataset into layers shared by all lessons."""

from ..core.layer import Layer, LayerManager
from ..core.phenology import filter_phenometrics, read_phenometrics, sites_to_layer, summarize_sites
from ..io.raster import read_raster_layer
from ..io.vector import read_gnis, read_vector_layer

PHENOPHASE = "Breaking leaf buds"


def load_workshop_data(paths, layer_manager=None, phenophase=PHENOPHASE, gnis_feature_class=None):
    """Read the phenometrics, regions, GNIS features and Spring Index raster.

    Parameters:
    -----------
    paths : dict
        "phenometrics", "regions", "gnis" and "spring_index" file paths (see ``create_sample_data``)
    layer_manager : LayerManager, optional
        Manager the layers are registered with; a new one is created when omitted
    phenophase : str
        Phenophase the observations are filtered to
    gnis_feature_class : str or list, optional
        GNIS feature classes to keep

    Returns:
    --------
    data : dict
        "manager", "observations" (tidy DataFrame) and the "sites", "regions", "gnis" and "spring_index" layers
    """
    manager = layer_manager if layer_manager is not None else LayerManager()

    observations = filter_phenometrics(read_phenometrics(paths["phenometrics"]), phenophase=phenophase)
    sites = sites_to_layer(summarize_sites(observations), name="sites", layer_manager=manager)
    sites.metadata["phenophase"] = phenophase

    regions = read_vector_layer(paths["regions"], layer_name="regions", layer_manager=manager)

    gnis = Layer.from_objects(read_gnis(paths["gnis"], feature_class=gnis_feature_class), name="gnis")
    manager.add_layer(gnis)

    spring_index = read_raster_layer(paths["spring_index"], layer_name="spring_index", layer_manager=manager)

    return {
        "manager": manager,
        "observations": observations,
        "sites": sites,
        "regions": regions,
        "gnis": gnis,
        "spring_index": spring_index,
    }
