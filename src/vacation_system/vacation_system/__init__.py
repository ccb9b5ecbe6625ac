"""Vacation System package.

This package is organized by feature modules (policies, balances, requests, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
