"""
mc_bearer — Minecraft bearer tokens from Microsoft account credentials.

Walks the Microsoft login → Xbox Live → XSTS → Minecraft services chain
and returns the final bearer token, classifying each hop's failures.

Built on the Railway-Oriented Programming (ROP) pattern for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
