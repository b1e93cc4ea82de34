"""
AssetForge: Incremental prefab generation for asset pipelines.

A pipeline node that turns groups of source assets into generated
composite artifacts, reusing cached outputs whose inputs have not changed
and pruning cache entries that the current run no longer produces.
"""

__version__ = "0.3.0"
