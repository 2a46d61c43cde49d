"""Personal-baseline physiological monitor: learns a subject's normal and classifies deviations."""

__version__ = "0.1.0"
