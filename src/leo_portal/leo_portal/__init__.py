"""LEO Portal package.

Feature modules (users, events, attendance, points, finance, ...) each keep a
thin Flask controller over service and repository layers. Side effects that
follow database writes live in ``triggers`` and scheduled digests in ``jobs``.
"""
