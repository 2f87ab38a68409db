# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for one concern:
#
#   article_service   — listing, feed, lookup and CRUD for Article
#   favorite_service  — favorite / unfavorite with the cached counter
#   tag_service       — the deduplicated global tag catalog
#   comment_service   — comments attached to an article
#   follow_service    — the follows graph and profiles
#   user_service      — user lookup and registration
#   projection        — viewer-aware rendering shared by the above
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.
