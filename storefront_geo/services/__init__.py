"""Business logic services package.

Contains the geo service's core logic: IP geolocation through an external
lookup API, currency conversion and formatting, and shipping cost calculation.
"""
