"""Engine Shed: a searchable catalogue of fictional trains."""

__version__ = "1.0.0"
