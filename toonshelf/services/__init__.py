"""
Application services.

Each service takes its ports in ``__init__`` and raises
``toonshelf.domain.errors`` exceptions; nothing here knows about HTTP.
"""
