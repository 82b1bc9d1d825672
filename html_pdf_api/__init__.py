"""
HTML to PDF API - REST service and CLI for HTML-to-PDF conversion.

Converts inline HTML, uploaded HTML files and remote URLs to PDF
using Playwright/Chromium. Each request gets its own browser, which is
always torn down once the PDF has been produced (or has failed).
"""

__version__ = "1.0.0"
