"""Release branch audit for repository fleets."""

__version__ = "0.3.0"
