"""a11y_scout.parser: parsers for site metadata files."""
