"""UstaBul marketplace package.

This package is organized by feature modules (users, masters, orders, ...)
with a thin Flask controller layer and service/repository layers.
"""
