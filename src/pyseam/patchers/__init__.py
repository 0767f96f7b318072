"""Text patchers that apply value changes while keeping comments and layout."""
