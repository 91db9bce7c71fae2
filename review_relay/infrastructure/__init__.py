# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - google/: Places and Business Profile review fetchers, OAuth client
# - persistence/: SQLite review, endpoint and settings stores
# - config/: Environment and settings management
#
# This layer can be replaced entirely without affecting domain/application layers.
