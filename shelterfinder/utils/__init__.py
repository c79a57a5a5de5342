"""
Utility modules for the Shelter Finder

- kv_store: key-value storage backends (in-memory, SQL)
- data_source: shelter data document readers (local file, HTTP)
- formatting: display helpers for distances, travel times and coordinates
"""
