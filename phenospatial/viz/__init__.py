# -*- coding: utf-8 -*-
"""Static maps and charts with matplotlib/seaborn and interactive web maps with folium."""
