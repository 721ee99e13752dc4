# dupscan
# Finds files with identical content under a directory tree.

__version__ = "1.0.0"
