"""
slurmcache - Throttled cache in front of Slurm CLI queries.

Serves the most recent scheduler payload to any number of concurrent
callers while running the underlying CLI at most once per poll window.
"""

__version__ = "0.1.0"
__app_name__ = "slurmcache"
