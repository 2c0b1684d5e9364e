"""
Rapport API Routes Package.

FastAPI route handlers, one module per domain:
- extract: text and file classification endpoints

Example:
    from api.routes import extract

    app.include_router(extract.router)
"""
