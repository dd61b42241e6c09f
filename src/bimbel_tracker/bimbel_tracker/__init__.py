"""Bimbel tracker package.

Feature modules (students, billing, attendance) each carry their own model,
repository, service and a thin Flask controller layer.
"""
