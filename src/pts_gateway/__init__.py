"""Session gateway for fuel-station PTS controllers."""

__version__ = "0.1.0"
