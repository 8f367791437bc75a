"""Pure helpers shared by the CMAP accessors."""
