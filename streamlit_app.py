# -*- coding: utf-8 -*-
"""Streamlit Webapp.

Browser front end for the phenology workshop: the web map of the lesson, with map clicks answered by a raster
pixel query.
"""

import os
import tempfile

import pandas as pd
from streamlit_folium import st_folium

import streamlit as st
from phenospatial import (
    build_web_map,
    compare_to_raster,
    create_sample_data,
    plot_categories,
    query_pixel,
    raster_summary,
)
from phenospatial.config import load_config
from phenospatial.lessons.data import load_workshop_data
from phenospatial.utils.helpers import sample_paths

st.set_page_config(page_title="phenospatial - Phenology Maps", page_icon="#", layout="wide")


@st.cache_resource
def get_temp_dir():
    """Get a temporary directory for storing sample data."""
    return tempfile.mkdtemp()


def initialize_session_state():
    """Initialize session state variables."""
    if "data" not in st.session_state:
        st.session_state.data = None
    if "clicks" not in st.session_state:
        st.session_state.clicks = []


def load_data(data_dir=None):
    """Load the workshop layers into the session, writing sample data when no directory is given."""
    try:
        with st.spinner("Reading workshop data..."):
            if data_dir:
                paths = sample_paths(data_dir)
            else:
                paths = create_sample_data(os.path.join(get_temp_dir(), "data"))
            st.session_state.data = load_workshop_data(paths)
            st.session_state.clicks = []
        return True
    except (OSError, RuntimeError, ValueError) as e:
        st.error(f"Error loading workshop data: {str(e)}")
        return False


def render_map(config):
    """Render the web map and answer clicks with the raster value."""
    data = st.session_state.data
    spring_index = data["spring_index"]

    color_column = st.sidebar.selectbox("Color sites by", ["species_name", "timing", "anomaly"])
    tolerance = st.sidebar.slider("On-time tolerance (days)", 1, 21, config["analysis"]["anomaly_tolerance_days"])

    compared = compare_to_raster(data["sites"], spring_index, tolerance=tolerance, layer_name="sites_for_app")
    palette = {
        "timing": config["palette"]["anomaly"],
        "anomaly": config["palette"]["diverging"],
    }.get(color_column, config["palette"]["categorical"])

    fmap = build_web_map(
        compared,
        color_column=color_column,
        palette=palette,
        title="Observed leaf-out and Spring Index first leaf",
        raster_layer=spring_index,
        raster_cmap=config["palette"]["continuous"],
        outline_layer=data["regions"],
        popup_columns=["site", "species_name", "mean_doy", "predicted_doy", "anomaly", "timing"],
        tiles=config["webmap"]["tiles"],
        zoom_start=config["webmap"]["zoom_start"],
        overlay_opacity=config["webmap"]["overlay_opacity"],
        query_raster=False,
    )

    col1, col2 = st.columns([3, 2])
    with col1:
        click_info = st_folium(fmap, height=600, width=900, key="phenology_map")

    if click_info and click_info.get("last_clicked"):
        lat = click_info["last_clicked"]["lat"]
        lon = click_info["last_clicked"]["lng"]
        pixel = query_pixel(spring_index, lon, lat, crs="EPSG:4326")
        if pixel is None:
            st.warning(f"({lat:.4f}, {lon:.4f}) is outside the Spring Index grid")
        else:
            entry = {"lat": round(lat, 4), "lon": round(lon, 4), "row": pixel["row"], "col": pixel["col"], "first_leaf_doy": pixel["value"]}
            if not st.session_state.clicks or st.session_state.clicks[-1] != entry:
                st.session_state.clicks.append(entry)

    with col2:
        st.subheader("Clicked cells")
        if st.session_state.clicks:
            st.dataframe(pd.DataFrame(st.session_state.clicks), use_container_width=True)
        else:
            st.info("Click the map to read the predicted first-leaf day")

        st.subheader("Sites")
        table = compared.objects.drop(columns=compared.objects.geometry.name)
        st.dataframe(table[["site", "species_name", "mean_doy", "predicted_doy", "anomaly", "timing"]], use_container_width=True)

    st.subheader("Timing by site")
    st.pyplot(plot_categories(compared, class_field="timing", class_color=config["palette"]["anomaly"], background=data["regions"]))


def render_sidebar_info():
    """Show the raster summary in the sidebar."""
    stats = raster_summary(st.session_state.data["spring_index"])
    for band, values in stats.items():
        st.sidebar.info(f"{band}: DOY {values['min']:.0f}-{values['max']:.0f}, mean {values['mean']:.1f}")


def main():
    """Main function to run the Streamlit app."""
    initialize_session_state()
    config = load_config()

    st.title("phenospatial - Phenology Maps")
    st.markdown("Observed leaf-out compared with the Spring Index first-leaf model")

    st.sidebar.header("Configuration")
    data_option = st.sidebar.radio("Choose data source:", ("Use sample data", "Local directory"))

    if data_option == "Local directory":
        data_dir = st.sidebar.text_input("Directory with the workshop files:", "")
        if st.sidebar.button("Load Data") and data_dir:
            load_data(data_dir)
    elif st.sidebar.button("Load Sample Data") or st.session_state.data is None:
        load_data()

    if st.session_state.data is not None:
        render_sidebar_info()
        render_map(config)


if __name__ == "__main__":
    main()
