"""Leave System package.

This package is organized by feature modules (employees, leaves, ledger)
with a thin Flask controller layer over service/repository layers.
"""
