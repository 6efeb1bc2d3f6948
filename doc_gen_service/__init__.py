"""
Doc Gen Service - paginated HTML/PDF pay transparency reports.

This service renders report data through Jinja2 templates and lays the
result out on fixed-height pages with Playwright/Chromium.
"""

__version__ = "0.1.0"
