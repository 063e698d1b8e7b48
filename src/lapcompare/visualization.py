#!/usr/bin/env python3
"""
Lap comparison visualization using folium maps.
"""

import logging

import folium
from folium.template import Template

from .comparison import LapComparison
from .config import LapCompareConfig
from .lap import Lap

logger = logging.getLogger(__name__)

REFERENCE_COLOR = "#2E86AB"
OTHER_COLOR = "#D23C4C"


class LapLegend(folium.MacroElement):
    """Legend naming both laps with their lengths."""

    def __init__(self, comparison: LapComparison):
        super().__init__()
        self.reference_name = comparison.reference.name or "Reference"
        self.other_name = comparison.other.name or "Other"
        self.reference_km = comparison.reference.length / 1000
        self.other_km = comparison.other.length / 1000
        self.zone = str(comparison.zone)
        self.reference_color = REFERENCE_COLOR
        self.other_color = OTHER_COLOR

        self._template = Template(
            """
        {% macro html(this, kwargs) %}
        <div id="lap-legend" style="
            position: fixed;
            bottom: 50px;
            left: 50px;
            width: 260px;
            background-color: white;
            border: 2px solid grey;
            z-index: 9999;
            font-size: 13px;
            padding: 12px;
            font-family: Arial, sans-serif;
            border-radius: 5px;
            box-shadow: 0 2px 5px rgba(0,0,0,0.2);
            box-sizing: border-box;
        ">
            <b>Legend</b> (UTM {{ this.zone }})<br>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: {{ this.reference_color }}; font-weight: bold; font-size: 18px;">&mdash;</span>
                {{ this.reference_name }} ({{ "%.2f"|format(this.reference_km) }} km)
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: {{ this.other_color }}; font-weight: bold; font-size: 18px;">&mdash;</span>
                {{ this.other_name }} ({{ "%.2f"|format(this.other_km) }} km)
            </div>
        </div>
        {% endmacro %}
        """
        )


def _add_lap(route_map: folium.Map, lap: Lap, color: str, label: str) -> None:
    """Add a lap polyline with start and end markers."""
    coordinates = [[pos.latitude, pos.longitude] for pos in lap.positions]

    folium.PolyLine(
        coordinates,
        color=color,
        weight=3,
        opacity=0.8,
        popup=label,
    ).add_to(route_map)

    folium.Marker(
        coordinates[0],
        popup=f"{label} start",
        icon=folium.Icon(color="green", icon="play"),
    ).add_to(route_map)

    folium.Marker(
        coordinates[-1],
        popup=f"{label} end",
        icon=folium.Icon(color="red", icon="stop"),
    ).add_to(route_map)


def create_comparison_map(
    comparison: LapComparison,
    output_filename: str,
    config: LapCompareConfig,
) -> None:
    """
    Create an interactive map showing both laps, save as HTML.

    Args:
        comparison: LapComparison with the two laps
        output_filename: Path where HTML map file should be saved
        config: LapCompareConfig containing settings like bbox_buffer

    Raises:
        ValueError: If either lap is empty
    """
    reference = comparison.reference
    other = comparison.other
    if not len(reference) or not len(other):
        raise ValueError("Cannot create map for an empty lap")

    ref_bbox = reference.get_bbox(config.bbox_buffer)
    other_bbox = other.get_bbox(config.bbox_buffer)
    south = min(ref_bbox[0], other_bbox[0])
    west = min(ref_bbox[1], other_bbox[1])
    north = max(ref_bbox[2], other_bbox[2])
    east = max(ref_bbox[3], other_bbox[3])

    center_lat = (south + north) / 2
    center_lon = (west + east) / 2

    logger.debug(f"Creating map centered at ({center_lat:.4f}, {center_lon:.4f})")

    route_map = folium.Map(
        location=[center_lat, center_lon],
        tiles=None,
    )

    folium.TileLayer(
        tiles="CartoDB positron",
        attr=(
            "&copy; <a href='https://www.openstreetmap.org/copyright'>OpenStreetMap</a> "
            "contributors &copy; <a href='https://carto.com/attributions'>CARTO</a>"
        ),
        name="Standard",
        control=True,
        show=True,
    ).add_to(route_map)

    folium.TileLayer(
        tiles="https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        attr=(
            "Tiles &copy; Esri &mdash; Source: Esri, i-cubed, USDA, USGS, AEX, GeoEye, "
            "Getmapping, Aerogrid, IGN, IGP, UPR-EGP, and the GIS User Community"
        ),
        name="Satellite",
        control=True,
        show=False,
    ).add_to(route_map)

    folium.LayerControl().add_to(route_map)

    _add_lap(route_map, reference, REFERENCE_COLOR, reference.name or "Reference")
    _add_lap(route_map, other, OTHER_COLOR, other.name or "Other")

    route_map.add_child(LapLegend(comparison))

    route_map.fit_bounds([[south, west], [north, east]])
    route_map.save(output_filename)

    logger.debug(f"Map saved to {output_filename}")
