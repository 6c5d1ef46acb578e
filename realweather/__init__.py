"""Real Weather — rewrite DCS mission weather from live METAR observations."""

__version__ = "2.0.0"
