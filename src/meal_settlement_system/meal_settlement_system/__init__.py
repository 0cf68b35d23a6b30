"""Meal Settlement System package.

This package is organized by feature modules (meals, settlements, pricing, ...)
with a thin Flask controller layer and SOLID service/repository layers.
"""
