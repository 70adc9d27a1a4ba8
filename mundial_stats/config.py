"""
Central configuration for the Mundial stats engine.

All shared constants and configuration values should be defined here
to avoid duplication and ensure consistency across modules.
"""

import os
from pathlib import Path

# --- Project Paths ---
DATA_DIR = Path(os.getenv("MUNDIAL_DATA_DIR", ".")).resolve()
SETTINGS_FILE = DATA_DIR / "settings.json"

# --- Source Locations ---
_SHEET = "https://docs.google.com/spreadsheets/d/1aG4Gl14KUL93l_ovqhA_4Dx4P-BBG-eewcy1OAJ_L4M/export?format=csv&gid="

CSV_URLS = {
    # Facts
    "fDetalhes": _SHEET + "1560720549",
    "fPersonagens": _SHEET + "1045005047",
    "fPlayersDados": _SHEET + "1193858435",
    "fKillFeed": _SHEET + "1663256849",
    # Dimensions
    "dTime": _SHEET + "2039387100",
    "dArma": _SHEET + "1006087866",
    "dSafe": _SHEET + "998190335",
    "dHab1": _SHEET + "602850523",
    "dHab2": _SHEET + "1028988179",
    "dHab3": _SHEET + "47739906",
    "dHab4": _SHEET + "1414607890",
    "dPets": _SHEET + "1145644018",
    "dItem": _SHEET + "1365432121",
}

# --- Display Labels (pass-through, never used by aggregation) ---
DEFAULT_APP_CONFIG = {
    "titlePart1": "MUNDIAL",
    "titlePart2": "2025",
    "subtitle": "Global Finals",
}

# --- Override Store Keys ---
URLS_OVERRIDE_KEY = "MUNDIAL_DASHBOARD_URLS"
CONFIG_OVERRIDE_KEY = "MUNDIAL_DASHBOARD_CONFIG"

# --- Parsing ---
CSV_DELIMITER = ","

# --- Filters ---
ALL = "All"  # Wildcard sentinel: matches every row
KILLS_MODE = "kills"  # Player filter targets the killer
DEATHS_MODE = "deaths"  # Player filter targets the victim
ALLOWED_MODES = frozenset({KILLS_MODE, DEATHS_MODE})

# --- Aggregation ---
TOP_N_USAGE = 5  # Default cutoff for usage-frequency tables
TOP_N_TEAMS = 3  # Podium size for per-metric team rankings
AVERAGE_DECIMALS = 2
PERCENT_DECIMALS = 1  # Kill-feed share of filtered events
