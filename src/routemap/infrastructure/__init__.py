"""Infrastructure layer — persistence backends and the route graph.

This layer depends on stdlib, the domain layer, and third-party libs
(redis, NetworkX). It must never import from services, commands, or http.
"""
