"""
Test suite for the Telesystem storefront backend.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_cart_service.py -v
"""
