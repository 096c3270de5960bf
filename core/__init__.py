# Core package - foundational components
#
# Modules:
# - config: Application settings
# - logging: Structured logging
# - errors: Error taxonomy surfaced to API callers
# - slug: Slug normalization
# - storage: Pluggable durable document stores (JSON file, in-memory)
