"""Controllers bridging the desktop views and the domain services."""
