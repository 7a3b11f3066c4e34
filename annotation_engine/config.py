"""
Configuration settings for the annotation engine
"""
import os
from pathlib import Path

# Storage directories
# Sidecar JSON files live next to the workspace, one file per annotated document
ANNOTATIONS_DIR = Path(os.getenv('ANNOTATIONS_DIR', '.lattice/annotations'))
EXPORTS_DIR = Path(os.getenv('ANNOTATION_EXPORTS_DIR', 'data/exports'))

# Schema versions
ANNOTATION_FILE_VERSION = 2
LEGACY_FILE_VERSION = 1
SHAPE_DATA_VERSION = 1

# Burn-in export settings
HIGHLIGHT_OPACITY = float(os.getenv('ANNOTATION_HIGHLIGHT_OPACITY', '0.35'))
NOTE_MARKER_SIZE = 12  # Points
NOTE_MARKER_FONT_SIZE = 8

# Shape overlay settings
# Percentage size used for shapes that carry no explicit w/h
DEFAULT_SHAPE_SIZE = 10.0

# Author recorded on annotations migrated from the version 1 format,
# which did not track authorship
LEGACY_AUTHOR = os.getenv('ANNOTATION_LEGACY_AUTHOR', 'migrated')

# Tolerance for normalized (0-1) coordinates produced by float conversions
NORMALIZED_TOLERANCE = 0.001
