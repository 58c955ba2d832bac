"""rep-coach: adaptive resistance-training session planner and live session runner."""

__version__ = "0.1.0"
