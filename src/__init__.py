"""
FNA Intake - Source Package

Financial Needs Analysis intake for agents: pick a client, capture
their household, goals, assets, insurance needs and retirement plans,
and hand out the analysis as a PDF.

DESIGN PRINCIPLES:
1. Nothing is written until the agent presses Save
2. Fail early, fail visibly
3. Backend messages are shown verbatim
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FNA Intake Team"
