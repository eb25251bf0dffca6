"""Building blocks: record files, sorting, index build/codec/persistence, lookups."""
