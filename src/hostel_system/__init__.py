"""Hostel management service.

Organized by feature modules (attendance, profiles, rooms, complaints, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
