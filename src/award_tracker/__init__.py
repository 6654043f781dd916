"""
Internal library package for award-tracker-service.

This package holds the service implementation (API routes, inference gateway, Airtable record store).

- Runtime package: `src/award_tracker/`
- Vercel entrypoint: `api/index.py`
"""
