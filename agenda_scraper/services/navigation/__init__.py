"""Booking widget navigation primitives."""

from .driver import NavigationDriver, text_xpath, xpath_literal

__all__ = ["NavigationDriver", "text_xpath", "xpath_literal"]
