# -*- coding: utf-8 -*-
"""Visualization functions for plotting histograms and scatter plots of layer attributes."""

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns


def plot_histogram(layer, attribute, bins=20, figsize=(10, 6), by_class=None):
    """Plot a histogram of attribute values.

    Parameters:
    -----------
    layer : Layer
        Layer containing data
    attribute : str
        Attribute to plot
    bins : int
        Number of bins
    figsize : tuple
        Figure size
    by_class : str, optional
        Column to group by (e.g., 'species_name')

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    if layer.objects is None or attribute not in layer.objects.columns:
        raise ValueError(f"Attribute '{attribute}' not found in layer objects")

    fig, ax = plt.subplots(figsize=figsize)

    if by_class and by_class in layer.objects.columns:
        data = layer.objects[[attribute, by_class]].dropna()

        for class_value, group in data.groupby(by_class, observed=True):
            sns.histplot(group[attribute], bins=bins, alpha=0.6, label=str(class_value), ax=ax)

        ax.legend(title=by_class)
    else:
        sns.histplot(layer.objects[attribute].dropna(), bins=bins, ax=ax)

    ax.set_title(f"Histogram of {attribute}")
    ax.set_xlabel(attribute)
    ax.set_ylabel("Count")

    return fig


def plot_scatter(layer, x_attribute, y_attribute, color_by=None, one_to_one=False, figsize=(10, 8)):
    """Create a scatter plot of two attributes.

    Parameters:
    -----------
    layer : Layer
        Layer containing data
    x_attribute : str
        Attribute for x-axis
    y_attribute : str
        Attribute for y-axis
    color_by : str, optional
        Attribute to color points by; categorical columns get a legend, numeric ones a colorbar
    one_to_one : bool
        Draw the y = x line, handy for observed against predicted values

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    if layer.objects is None or x_attribute not in layer.objects.columns or y_attribute not in layer.objects.columns:
        raise ValueError("Attributes not found in layer objects")

    fig, ax = plt.subplots(figsize=figsize)
    data = layer.objects.drop(columns=layer.objects.geometry.name)

    if color_by and color_by in data.columns:
        sns.scatterplot(data=data, x=x_attribute, y=y_attribute, hue=color_by, ax=ax, s=60, edgecolor="k", alpha=0.8)
    else:
        ax.scatter(data[x_attribute], data[y_attribute], alpha=0.7, s=50, edgecolor="k")

    if one_to_one:
        values = data[[x_attribute, y_attribute]].to_numpy(dtype=float)
        low, high = np.nanmin(values), np.nanmax(values)
        ax.plot([low, high], [low, high], linestyle="--", color="grey", label="1:1")

    ax.set_title(f"{y_attribute} vs {x_attribute}")
    ax.set_xlabel(x_attribute)
    ax.set_ylabel(y_attribute)
    ax.grid(alpha=0.3)

    return fig
