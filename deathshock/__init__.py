"""Shock an OpenShock device when the player dies.

The core (config loading, request building, trigger control) has no FastAPI
dependency; `deathshock.main` is the bridge the game-side mod talks to.
"""

__version__ = "0.1.0"
