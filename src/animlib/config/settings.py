"""
Animation Configuration Settings

All configuration constants for retargeting, clip cleanup and skin optimization.
Modify these values to change library behavior.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# ============================================================================
# Project Paths
# ============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "assets" / "config"
BONE_MATCH_CONFIG = CONFIG_DIR / "animation" / "bone_match.json"

# ============================================================================
# Retargeting
# ============================================================================

RETARGET_CLIP_SUFFIX = "_retargeted"  # Appended to retargeted clip names

# Prefixes stripped (case-insensitive) before comparing bone names.
# Longer prefixes come first so "mixamorig:Hips" loses the colon too.
BONE_NAME_PREFIXES = ("mixamorig:", "mixamorig", "mixamo:")
BONE_NAME_SEPARATORS = ("_", "-")

# ============================================================================
# Clip Cleanup
# ============================================================================

# Track targets containing these fragments are mesh/accessory names, not bones
NON_BONE_NAME_FRAGMENTS = ("hair_", "hat_", "face_accessory_")
NON_BONE_NAME_LITERALS = ("fullBody_Toes",)

# Track targets starting with these are dropped when a clip enters the library
LIBRARY_PRECLEAN_PREFIXES = ("hair_", "hat_", "face_accessory_", "fullBody_Toes", "fullBody_")

DEBUG_ANIMATION_CLEANUP = False  # Log removed tracks during clip cleanup

# ============================================================================
# Skinning
# ============================================================================

SKIN_INFLUENCE_SLOTS = 4          # Slots per vertex in skin index/weight buffers
DEFAULT_MAX_SKIN_INFLUENCES = 2   # Default cap used by the skin optimizer
MOBILE_MAX_SKIN_INFLUENCES = 2    # Recommended cap on mobile devices
DESKTOP_MAX_SKIN_INFLUENCES = 4   # Recommended cap on desktop (no reduction)

MOBILE_USER_AGENT_PATTERN = re.compile(
    r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE
)


@dataclass(slots=True)
class PerformanceSettings:
    """Platform dependent animation performance settings."""

    max_skin_influences: int
    enable_debug_logs: bool


def is_mobile_user_agent(user_agent: Optional[str]) -> bool:
    """Return True if the user agent string belongs to a mobile device."""
    if not user_agent:
        return False
    return MOBILE_USER_AGENT_PATTERN.search(user_agent) is not None


def get_recommended_settings(user_agent: Optional[str] = None) -> PerformanceSettings:
    """
    Get recommended animation settings for the current platform.

    Args:
        user_agent: Client user agent string (None for desktop)

    Returns:
        PerformanceSettings with the skin influence cap and debug log flag
    """
    mobile = is_mobile_user_agent(user_agent)
    return PerformanceSettings(
        max_skin_influences=MOBILE_MAX_SKIN_INFLUENCES if mobile else DESKTOP_MAX_SKIN_INFLUENCES,
        enable_debug_logs=DEBUG_ANIMATION_CLEANUP and not mobile,
    )


# ============================================================================
# Bone Name Matching - Loaded from JSON Config
# ============================================================================

def load_bone_match_policy(config_path: Optional[Path] = None):
    """
    Load the bone name match policy from a JSON configuration file.

    The file holds an object with optional "prefixes", "separators" and
    "case_sensitive" keys. Missing files fall back to the defaults above.

    Args:
        config_path: Path to JSON file (defaults to BONE_MATCH_CONFIG)

    Returns:
        BoneNameMatchPolicy instance
    """
    from ..retarget.bone_mapper import BoneNameMatchPolicy

    config_path = Path(config_path) if config_path is not None else BONE_MATCH_CONFIG

    if not config_path.exists():
        logger.debug("Bone match config not found at %s, using defaults", config_path)
        return BoneNameMatchPolicy()

    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Error loading bone match config %s: %s", config_path, e)
        return BoneNameMatchPolicy()

    return BoneNameMatchPolicy.from_dict(config)
