"""Clinic application for the carebook backend.

Models, services, serializers, views and routes for professional slot
collections, bookings, complaints, medical forms, website content,
notifications and the admin panel.
"""
