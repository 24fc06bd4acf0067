"""
Command line interface for the SAR downloads server.

Commands:
- init-db: Create the index table
- populate: Ingest upstream GitHub releases
- check: Report index/blob store divergence
"""
