# -*- coding: utf-8 -*-
"""Summary statistics for layer attributes and raster bands."""
