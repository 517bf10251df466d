"""estatehub: real-estate listings backend.

Agents publish property listings with images, prospective buyers submit
inquiries and viewing appointments, and agents manage both through
authenticated, ownership-checked endpoints.
"""

__version__ = "0.1.0"
