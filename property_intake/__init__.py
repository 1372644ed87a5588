"""
Property Intake - Source Package

A guided, conversational way to create property and mortgage records
for a property-management backend, in French.

DESIGN PRINCIPLES:
1. One question at a time, in a fixed order
2. Bad answers are explained, never fatal
3. Optional fields can always be skipped
4. Nothing is saved before the user reviews the summary
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Property Intake Team"
