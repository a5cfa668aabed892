"""Store and filesystem transfer pipelines.

This module streams store snapshots into mapped YAML files and
imports edited files back into the store behind a confirmation gate.
"""
