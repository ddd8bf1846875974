# -*- coding: utf-8 -*-
"""Summary statistics for vector attributes and raster bands."""

import numpy as np


def attach_basic_stats(layer, column, prefix=None):
    """Attach basic statistics for a column to a layer.

    Parameters:
    -----------
    layer : Layer
        Layer to attach statistics to
    column : str
        Column to calculate statistics for
    prefix : str, optional
        Prefix for result names

    Returns:
    --------
    stats : dict
        Dictionary with calculated statistics
    """
    if layer.objects is None or column not in layer.objects.columns:
        raise ValueError(f"Column '{column}' not found in layer objects")

    prefix = f"{prefix}_" if prefix else ""

    values = layer.objects[column].dropna()
    if values.empty:
        return {f"{prefix}count": 0}

    stats = {
        f"{prefix}min": float(values.min()),
        f"{prefix}max": float(values.max()),
        f"{prefix}mean": float(values.mean()),
        f"{prefix}median": float(values.median()),
        f"{prefix}std": float(values.std()),
        f"{prefix}sum": float(values.sum()),
        f"{prefix}count": int(len(values)),
    }

    for p in [10, 25, 50, 75, 90]:
        stats[f"{prefix}percentile_{p}"] = float(np.percentile(values, p))

    return stats


def attach_class_distribution(layer, class_column="timing"):
    """Calculate the distribution of categories in a layer.

    Returns:
    --------
    distribution : dict
        Dictionary with class counts and percentages
    """
    if layer.objects is None or class_column not in layer.objects.columns:
        return {}

    class_counts = layer.objects[class_column].value_counts()
    total_count = len(layer.objects)
    class_percentages = (class_counts / total_count * 100).round(2)

    return {
        "counts": {str(k): int(v) for k, v in class_counts.items()},
        "percentages": {str(k): float(v) for k, v in class_percentages.items()},
        "total": total_count,
    }


def raster_summary(layer, band_names=None):
    """Per-band statistics of a raster layer, ignoring nodata and NaN cells.

    Parameters:
    -----------
    layer : Layer
        Layer with raster data
    band_names : list of str, optional
        Names of the bands; defaults to the band descriptions or Band_1, Band_2, ...

    Returns:
    --------
    stats : dict
        Band name to statistics
    """
    if layer.raster is None:
        raise ValueError("Layer must have raster data")

    num_bands = layer.raster.shape[0]
    if band_names is None:
        descriptions = layer.metadata.get("descriptions") or []
        band_names = [
            descriptions[i] if i < len(descriptions) and descriptions[i] else f"Band_{i + 1}" for i in range(num_bands)
        ]

    stats = {}
    for i, band_name in enumerate(band_names[:num_bands]):
        band_data = layer.raster[i].astype(float)
        valid = ~np.isnan(band_data)
        if layer.nodata is not None and not np.isnan(layer.nodata):
            valid &= band_data != layer.nodata
        values = band_data[valid]

        if values.size == 0:
            stats[band_name] = {"valid_cells": 0}
            continue

        stats[band_name] = {
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "mean": float(np.mean(values)),
            "std": float(np.std(values)),
            "median": float(np.median(values)),
            "percentile_5": float(np.percentile(values, 5)),
            "percentile_95": float(np.percentile(values, 95)),
            "valid_cells": int(values.size),
        }

    return stats
