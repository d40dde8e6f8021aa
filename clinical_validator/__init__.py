"""Clinical Validator: healthcare identifier validation and reporting utilities."""

__version__ = "1.0.0"
