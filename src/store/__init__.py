"""Cluster and store access layer.

This module reaches etcd through kubectl and etcdctl and runs the
external object codec. It powers the dump and import pipelines.
"""
