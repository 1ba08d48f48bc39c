"""FastAPI/Starlette request, session, view and routing helpers."""
