"""Workline attendance package.

Organized by feature modules (qr_sessions, attendance, employees, ...) with a
thin Flask controller layer over service/repository layers.
"""
