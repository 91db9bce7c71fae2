# Review Relay - Google Review Collection & Distribution
# =======================================================
# Collects Google Business reviews, stores them, and relays selected
# reviews to partner websites.
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI HTTP API and entry points (web/)
# - Application:    Use cases and orchestration (distribution, sync)
# - Domain:         Pure business logic (models, merge, intake, errors)
# - Infrastructure: External services (Google APIs, SQLite, config)
#
# Stores and fetchers are injected, so any backend can be swapped
# without touching the domain or application layers.

__version__ = "0.1.0"
