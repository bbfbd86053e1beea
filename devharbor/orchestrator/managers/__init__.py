"""Orchestrators for the workspace lifecycle.

Each module owns one flow (provisioning, releases, teardown, reads and
mutations).  Orchestrators receive the control-plane gateway at
construction and raise domain exceptions from ``errors.py``, never HTTP
exceptions -- that translation is the router's responsibility.
"""
