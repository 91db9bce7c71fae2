# Presentation Layer
# ==================
# FastAPI JSON API (app.py) and its request bodies (schemas.py).
