"""Cluster components (etcd, metasrv, datanode, frontend) started from their binaries."""