"""Pure monitor logic: parsing, normalization, models and ports."""
