"""Services driven by the dupscan command line."""
