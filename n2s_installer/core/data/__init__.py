"""
Packaged static data.

``profile.yml`` holds the default patch profile; locate it through
``DEFAULT_PROFILE_PATH`` rather than building the path by hand.
"""

from pathlib import Path

DEFAULT_PROFILE_PATH = Path(__file__).parent / "profile.yml"
