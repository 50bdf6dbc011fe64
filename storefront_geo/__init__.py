"""Storefront Geo Service Package.

A small HTTP service backing an e-commerce storefront with location-aware
defaults: IP-based country/currency detection, per-country shipping quotes
with free shipping thresholds, and conversion between supported currencies.

The application follows a modular architecture with separate concerns for:
- Reference tables loaded from YAML configuration
- Currency conversion and display formatting
- Shipping zone resolution and cost calculation
- IP geolocation with US fallback defaults
- HTTP handlers exposing the above as read-only JSON endpoints
"""
