"""
Component tests for the marketplace API

Component tests verify the interaction between routers, services and
repositories against a real (in-memory SQLite) database, with no mocking
of internal layers. Only Supabase Storage is stubbed.
"""
