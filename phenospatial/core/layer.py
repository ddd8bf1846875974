# -*- coding: utf-8 -*-
"""Defines the Layer class and related functionality for organizing geospatial data.

A layer is a named container for either vector objects (a GeoDataFrame with one geometry per row) or a gridded
raster (bands, height, width) tied to the world through an affine transform and a coordinate reference system.
Every lesson operation takes layers and hands back a new layer whose parent is the input, so the chain of
reprojections, crops and joins a student ran is always visible. The LayerManager keeps those layers together.
"""

import uuid

import pandas as pd

LAYER_TYPES = ("vector", "raster", "derived", "generic")


class Layer:
    """A Layer holds vector objects or raster cells together with their georeferencing.

    Layers can be read from files or derived from another layer by an operation.
    Each layer can have functions attached to calculate additional properties.
    """

    def __init__(self, name=None, parent=None, type="generic"):
        """Initialize a Layer.

        Parameters:
        -----------
        name : str, optional
            Name of the layer. If None, a unique name will be generated.
        parent : Layer, optional
            Parent layer that this layer is derived from.
        type : str
            Type of layer: "vector", "raster", "derived", or "generic"
        """
        if type not in LAYER_TYPES:
            raise ValueError(f"Unknown layer type '{type}', expected one of {LAYER_TYPES}")

        self.id = str(uuid.uuid4())
        self.name = name if name else f"Layer_{self.id[:8]}"
        self.parent = parent
        self.type = type
        self.created_at = pd.Timestamp.now()

        self.raster = None
        self.objects = None
        self.metadata = {}
        self.transform = None
        self.crs = None
        self.nodata = None

        self.attached_functions = {}

    @classmethod
    def from_objects(cls, objects, name=None, parent=None, type="vector"):
        """Wrap a GeoDataFrame in a layer, taking the CRS from the frame."""
        layer = cls(name=name, parent=parent, type=type)
        layer.objects = objects
        layer.crs = objects.crs
        return layer

    @classmethod
    def from_raster(cls, raster, transform, crs, nodata=None, name=None, parent=None, type="raster"):
        """Wrap a raster array in a layer. 2-D arrays are promoted to a single band."""
        if raster.ndim == 2:
            raster = raster.reshape(1, *raster.shape)
        if raster.ndim != 3:
            raise ValueError(f"Raster must have shape (bands, height, width), got {raster.shape}")

        layer = cls(name=name, parent=parent, type=type)
        layer.raster = raster
        layer.transform = transform
        layer.crs = crs
        layer.nodata = nodata
        return layer

    @property
    def is_raster(self):
        return self.raster is not None

    @property
    def is_vector(self):
        return self.objects is not None

    @property
    def shape(self):
        """(height, width) of the raster grid."""
        if self.raster is None:
            raise ValueError(f"Layer '{self.name}' has no raster data")
        return self.raster.shape[-2], self.raster.shape[-1]

    @property
    def bounds(self):
        """(left, bottom, right, top) in the layer's CRS."""
        if self.objects is not None:
            return tuple(float(v) for v in self.objects.total_bounds)

        if self.raster is not None:
            from rasterio.transform import array_bounds

            height, width = self.shape
            west, south, east, north = array_bounds(height, width, self.transform)
            return (west, south, east, north)

        raise ValueError(f"Layer '{self.name}' has neither objects nor raster data")

    def attach_function(self, function, name=None, **kwargs):
        """Attach a function to this layer and execute it.

        Parameters:
        -----------
        function : callable
            Function to attach and execute
        name : str, optional
            Name for this function. If None, uses function.__name__
        **kwargs : dict
            Arguments to pass to the function

        Returns:
        --------
        self : Layer
            Returns self for chaining
        """
        func_name = name if name else function.__name__

        result = function(self, **kwargs)

        self.attached_functions[func_name] = {
            "function": function,
            "args": kwargs,
            "result": result,
        }

        return self

    def get_function_result(self, function_name):
        """Get the result of an attached function."""
        if function_name not in self.attached_functions:
            raise ValueError(f"Function '{function_name}' not attached to this layer")

        return self.attached_functions[function_name]["result"]

    def derive(self, name, type="derived"):
        """Create an empty child layer sharing this layer's georeferencing."""
        child = Layer(name=name, parent=self, type=type)
        child.transform = self.transform
        child.crs = self.crs
        child.nodata = self.nodata
        return child

    def copy(self):
        """Create a copy of this layer.

        Returns:
        --------
        layer_copy : Layer
            Copy of this layer
        """
        new_layer = Layer(name=f"{self.name}_copy", parent=self.parent, type=self.type)

        if self.raster is not None:
            new_layer.raster = self.raster.copy()

        if self.objects is not None:
            new_layer.objects = self.objects.copy()

        new_layer.metadata = self.metadata.copy()
        new_layer.transform = self.transform
        new_layer.crs = self.crs
        new_layer.nodata = self.nodata

        return new_layer

    def __str__(self):
        """String representation of the layer."""
        parent_name = self.parent.name if self.parent else "None"

        if self.raster is not None:
            bands, height, width = self.raster.shape
            content = f"raster: {bands}x{height}x{width}"
        elif self.objects is not None:
            content = f"objects: {len(self.objects)}"
        else:
            content = "empty"

        return f"Layer '{self.name}' (type: {self.type}, parent: {parent_name}, {content}, crs: {self.crs})"


class LayerManager:
    """Manages a collection of layers and their relationships."""

    def __init__(self):
        """Initialize the layer manager."""
        self.layers = {}
        self.active_layer = None

    def add_layer(self, layer, set_active=True):
        """Add a layer to the manager.

        Parameters:
        -----------
        layer : Layer
            Layer to add
        set_active : bool
            Whether to set this layer as the active layer

        Returns:
        --------
        layer : Layer
            The added layer
        """
        self.layers[layer.id] = layer

        if set_active:
            self.active_layer = layer

        return layer

    def get_layer(self, layer_id_or_name):
        """Get a layer by ID or name."""
        if layer_id_or_name in self.layers:
            return self.layers[layer_id_or_name]

        for layer in self.layers.values():
            if layer.name == layer_id_or_name:
                return layer

        raise ValueError(f"Layer '{layer_id_or_name}' not found")

    def get_layer_names(self):
        """Get a list of all layer names."""
        return [layer.name for layer in self.layers.values()]

    def lineage(self, layer_id_or_name):
        """Names of the layer and its ancestors, oldest first."""
        layer = self.get_layer(layer_id_or_name)
        names = []
        while layer is not None:
            names.append(layer.name)
            layer = layer.parent
        return names[::-1]

    def remove_layer(self, layer_id_or_name):
        """Remove a layer from the manager."""
        layer = self.get_layer(layer_id_or_name)

        if layer.id in self.layers:
            del self.layers[layer.id]

        if self.active_layer and self.active_layer.id == layer.id:
            if self.layers:
                self.active_layer = list(self.layers.values())[-1]
            else:
                self.active_layer = None


def register(layer, layer_manager=None):
    """Add the layer to the manager when one is given and return it."""
    if layer_manager:
        layer_manager.add_layer(layer)
    return layer
