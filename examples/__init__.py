"""Worked scenarios built on Plugboard."""
