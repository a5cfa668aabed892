"""Core constants used across etcdfs modules.

This module centralizes defaults for cluster, store, and file layout.
Keeping values here avoids magic literals in transfer logic.
"""

from __future__ import annotations

DEFAULT_OUTPUT_DIR_NAME = "out"
DEFAULT_FILTER_PATTERN = "*"
DEFAULT_NAMESPACE_ANCHOR = "registry"
DEFAULT_KEY_PREFIX = "/registry/"
KEY_SEPARATOR = "/"
MAPPED_FILE_SUFFIX = ".yaml"
DEFAULT_KUBECTL_BINARY = "kubectl"
DEFAULT_CODEC_BINARY = "auger"
DEFAULT_ETCD_NAMESPACE = "kube-system"
DEFAULT_ETCD_SELECTOR = "component=etcd"
DEFAULT_APISERVER_SELECTOR = "component=kube-apiserver"
DEFAULT_ETCDCTL_BINARY = "etcdctl"
DEFAULT_ETCD_CACERT = "/etc/kubernetes/pki/etcd/ca.crt"
DEFAULT_ETCD_CERT = "/etc/kubernetes/pki/etcd/server.crt"
DEFAULT_ETCD_KEY = "/etc/kubernetes/pki/etcd/server.key"
ETCDCTL_API_VERSION = "3"
DEFAULT_COMMAND_TIMEOUT_SECONDS = 60.0
CONFIG_FILE_ENV = "ETCDFS_CONFIG"
