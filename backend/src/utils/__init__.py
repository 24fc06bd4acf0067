"""
Utility modules for the SAR downloads backend.

This package contains shared utilities used across the application:
- hashing: SHA-256 digest and CRC-32 checksum of stored bytes
- version: SemVer and path segment validation
- logging_config: Named, structured loggers
- listing_renderer: HTML listing page
"""
