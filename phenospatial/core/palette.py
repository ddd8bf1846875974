# -*- coding: utf-8 -*-
"""Category (factor) to color mapping shared by the static and the web maps.

A palette is an ordered dict from category to hex color. Categories keep the order in which they first appear
unless explicit levels are given, the same way a factor keeps its levels, so a species gets the same color in every
figure of a lesson.
"""

from collections import OrderedDict

import matplotlib
import numpy as np
import pandas as pd
from matplotlib.colors import ListedColormap, to_hex

OVERFLOW_CMAP = "turbo"


def _levels(categories, levels=None):
    observed = [c for c in pd.unique(pd.Series(list(categories), dtype=object)) if not pd.isna(c)]
    if levels is None:
        return observed

    unknown = [c for c in observed if c not in levels]
    if unknown:
        raise ValueError(f"Categories {unknown} are not among the given levels")
    return list(levels)


def _sample_colors(palette, n):
    cmap = matplotlib.colormaps[palette]
    qualitative = isinstance(cmap, ListedColormap) and cmap.N < 32
    if qualitative and n <= cmap.N:
        return [to_hex(c) for c in cmap.colors[:n]]
    if qualitative:
        # too many categories: spread over a continuous colormap instead of repeating colors
        cmap = matplotlib.colormaps[OVERFLOW_CMAP]
    return [to_hex(c) for c in cmap(np.linspace(0, 1, max(n, 1)))[:n]]


def factor_palette(categories, palette="tab10", levels=None):
    """Assign a color to every category.

    Parameters:
    -----------
    categories : iterable
        Category values, duplicates and missing values allowed
    palette : str, list or dict
        Matplotlib colormap name, a list of colors used in order, or a dict of fixed colors (categories missing from
        the dict get colors from the default colormap)
    levels : list, optional
        Explicit category order

    Returns:
    --------
    palette : OrderedDict
        Category to hex color
    """
    levels = _levels(categories, levels)

    if isinstance(palette, dict):
        fixed = {k: to_hex(v) for k, v in palette.items()}
        free = [c for c in levels if c not in fixed]
        extra = dict(zip(free, _sample_colors("tab10", len(free))))
        return OrderedDict((c, fixed.get(c) or extra[c]) for c in levels)

    if isinstance(palette, (list, tuple)):
        if len(palette) < len(levels):
            raise ValueError(f"{len(levels)} categories but only {len(palette)} colors given")
        return OrderedDict((c, to_hex(color)) for c, color in zip(levels, palette))

    return OrderedDict(zip(levels, _sample_colors(palette, len(levels))))


def map_colors(values, palette, missing_color=None):
    """Color for every value; a value missing from the palette raises unless ``missing_color`` is given."""
    colors = []
    for value in values:
        if value in palette:
            colors.append(palette[value])
        elif missing_color is not None:
            colors.append(missing_color)
        else:
            raise ValueError(f"No color assigned to category '{value}'")
    return colors


def bin_values(values, bins, labels=None, right=True):
    """Cut continuous values into ordered categories (e.g. day-of-year ranges)."""
    if labels is not None and len(labels) != len(bins) - 1:
        raise ValueError(f"{len(bins) - 1} bins need {len(bins) - 1} labels, got {len(labels)}")
    return pd.cut(pd.Series(values), bins=bins, labels=labels, right=right, include_lowest=True)


def continuous_colors(values, cmap="viridis", vmin=None, vmax=None):
    """Hex colors for numeric values on a continuous colormap; NaN values get None."""
    values = np.asarray(values, dtype=float)
    vmin = np.nanmin(values) if vmin is None else vmin
    vmax = np.nanmax(values) if vmax is None else vmax
    span = (vmax - vmin) or 1.0
    scaled = np.clip((values - vmin) / span, 0, 1)
    colormap = matplotlib.colormaps[cmap]
    return [None if np.isnan(v) else to_hex(colormap(v)) for v in scaled]
