"""remotectl - manage and mount rclone remotes from the terminal."""

__version__ = "0.1.0"
