"""Lecture Portal package.

This package is organized by feature modules (users, lectures, nfc, attendance, ...)
with a thin Flask controller layer over service/repository layers.
"""
