"""
Screenshot API: render a web page in headless Chromium and return a PNG
"""

__version__ = "1.0.0"
