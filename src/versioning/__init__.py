"""Version parsing, comparison and dependency resolution."""
